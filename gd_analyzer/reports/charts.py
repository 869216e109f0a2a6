"""Chart generation for GD Analyzer reports.

Creates matplotlib charts for annual cash flows, accumulated return against
the initial investment, generation degradation and the NPV profile. Charts
are saved as PNG files for embedding in PDF reports.
"""

import math
from pathlib import Path
from typing import Dict, List, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from gd_analyzer.models.project import CalculationResults, YearResult

REVENUE_COLOR = "#22c55e"
COST_COLOR = "#ef4444"
CASH_FLOW_COLOR = "#3b82f6"
GENERATION_COLOR = "#eab308"


def _thousands_formatter(x, _):
    return f"R$ {x / 1e3:,.0f}K".replace(",", ".")


def generate_chart_data(yearly_results: Sequence[YearResult]) -> Dict[str, List[dict]]:
    """Build per-year series for the charts.

    Returns:
        Dict with 'cash_flow' (year, revenue, costs, free_cash_flow),
        'accumulated' (year, accumulated) and 'generation' (year, generation).
    """
    return {
        "cash_flow": [
            {"year": y.year, "revenue": y.revenue, "costs": y.total_costs,
             "free_cash_flow": y.free_cash_flow}
            for y in yearly_results
        ],
        "accumulated": [
            {"year": y.year, "accumulated": y.accumulated_cash_flow}
            for y in yearly_results
        ],
        "generation": [
            {"year": y.year, "generation": y.generation}
            for y in yearly_results
        ],
    }


def create_cashflow_chart(yearly_results: Sequence[YearResult], output_path: str) -> None:
    """Create a bar chart of annual revenue, costs and free cash flow.

    Args:
        yearly_results: Projection years.
        output_path: File path to save the PNG chart.
    """
    data = generate_chart_data(yearly_results)["cash_flow"]
    years = [d["year"] for d in data]

    fig, ax = plt.subplots(figsize=(8, 4.5), dpi=150)
    bar_width = 0.27

    ax.bar([y - bar_width for y in years], [d["revenue"] for d in data],
           bar_width, label="Revenue", color=REVENUE_COLOR, alpha=0.7)
    ax.bar(years, [d["costs"] for d in data],
           bar_width, label="Costs", color=COST_COLOR, alpha=0.7)
    ax.bar([y + bar_width for y in years], [d["free_cash_flow"] for d in data],
           bar_width, label="Free Cash Flow", color=CASH_FLOW_COLOR, alpha=0.85)

    ax.set_xlabel("Year", fontsize=11)
    ax.set_ylabel("R$", fontsize=11)
    ax.set_title("Annual Cash Flow", fontsize=13, fontweight="bold")
    ax.legend(fontsize=10)
    ax.axhline(y=0, color="black", linewidth=0.5)
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(_thousands_formatter))
    ax.grid(axis="y", alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def create_accumulated_chart(
    yearly_results: Sequence[YearResult],
    initial_investment: float,
    output_path: str,
) -> None:
    """Line chart of accumulated free cash flow against the initial investment."""
    data = generate_chart_data(yearly_results)["accumulated"]
    years = [d["year"] for d in data]

    fig, ax = plt.subplots(figsize=(8, 4.5), dpi=150)
    ax.plot(years, [d["accumulated"] for d in data], color=CASH_FLOW_COLOR,
            linewidth=3, marker="o", markersize=3, label="Accumulated Return")
    ax.plot(years, [initial_investment] * len(years), color=COST_COLOR,
            linewidth=2, linestyle="--", label="Initial Investment")

    ax.set_xlabel("Year", fontsize=11)
    ax.set_ylabel("R$", fontsize=11)
    ax.set_title("Accumulated Return vs. Investment", fontsize=13, fontweight="bold")
    ax.legend(fontsize=10)
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(_thousands_formatter))
    ax.grid(alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def create_generation_chart(yearly_results: Sequence[YearResult], output_path: str) -> None:
    """Line chart of annual generation (MWh) showing degradation."""
    data = generate_chart_data(yearly_results)["generation"]

    fig, ax = plt.subplots(figsize=(8, 4), dpi=150)
    ax.plot([d["year"] for d in data], [d["generation"] for d in data],
            color=GENERATION_COLOR, linewidth=3, label="Generation (MWh)")

    ax.set_xlabel("Year", fontsize=11)
    ax.set_ylabel("MWh", fontsize=11)
    ax.set_title("Annual Generation Degradation", fontsize=13, fontweight="bold")
    ax.legend(fontsize=10)
    ax.yaxis.set_major_formatter(mticker.FormatStrFormatter("%.1f"))
    ax.grid(alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def create_npv_profile_chart(
    rates_percent: Sequence[float],
    npv_values: Sequence[float],
    irr: float,
    output_path: str,
) -> None:
    """Line chart of NPV against discount rate, marking the IRR."""
    fig, ax = plt.subplots(figsize=(8, 4), dpi=150)
    ax.plot(list(rates_percent), list(npv_values), color=CASH_FLOW_COLOR, linewidth=2.5)
    ax.axhline(y=0, color="black", linewidth=0.5)
    if math.isfinite(irr) and min(rates_percent) <= irr <= max(rates_percent):
        ax.axvline(x=irr, color=COST_COLOR, linestyle="--", linewidth=1.5,
                   label=f"IRR {irr:.2f}%".replace(".", ","))
        ax.legend(fontsize=10)

    ax.set_xlabel("Discount Rate (%)", fontsize=11)
    ax.set_ylabel("NPV (R$)", fontsize=11)
    ax.set_title("NPV Profile", fontsize=13, fontweight="bold")
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(_thousands_formatter))
    ax.grid(alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def create_all_charts(results: CalculationResults, output_dir: str) -> List[str]:
    """Render the three projection charts into output_dir.

    Returns:
        Paths of the PNG files written.
    """
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths = [
        str(out / "cash_flow.png"),
        str(out / "accumulated_return.png"),
        str(out / "generation.png"),
    ]
    create_cashflow_chart(results.yearly_results, paths[0])
    create_accumulated_chart(results.yearly_results, results.initial_investment, paths[1])
    create_generation_chart(results.yearly_results, paths[2])
    return paths
