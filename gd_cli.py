#!/usr/bin/env python3
"""
GD Analyzer CLI - Distributed Solar Generation Financial Analysis Tool

Projects the cash flows of a distributed generation (GD) photovoltaic
project under Brazilian regulated tariffs and reports:
- Financial metrics (NPV, IRR, payback year, ROI) and a viability score
- The year-by-year cash flow table
- CAPEX x tariff sensitivity tables
- PDF executive summary, Excel export and PNG charts

Usage:
    python gd_cli.py                                  # Default project
    python gd_cli.py --distributor CEMIG --power 250  # Override inputs
    python gd_cli.py --scenario project.json --report # Load inputs and report
    python gd_cli.py --help                           # Show all options
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from gd_analyzer.data.distributors import DistributorLibrary
from gd_analyzer.data.scenarios import load_scenario
from gd_analyzer.data.validators import validate_project
from gd_analyzer.models.calculations import calculate_project_economics
from gd_analyzer.models.project import CalculationResults, Project, SystemData
from gd_analyzer.models.sensitivity import calculate_npv_profile, calculate_sensitivity
from gd_analyzer.models.viability import assess_viability
from gd_analyzer.reports.charts import create_all_charts, create_npv_profile_chart
from gd_analyzer.reports.excel_export import export_to_excel
from gd_analyzer.reports.executive import generate_executive_summary
from gd_analyzer.utils.formatters import (
    format_currency,
    format_energy,
    format_number,
    format_payback,
    format_percent,
)

logger = logging.getLogger("gd_cli")

DEFAULT_DISTRIBUTOR = "CPFL"
EXIT_VALIDATION_ERROR = 2


# ============================================================================
# FORMATTING UTILITIES
# ============================================================================

def print_header(text: str, char: str = "=") -> None:
    """Print a formatted section header."""
    width = 70
    print(f"\n{char * width}")
    print(f" {text}")
    print(f"{char * width}")


def print_subheader(text: str) -> None:
    print(f"\n--- {text} ---")


def print_table(headers: List[str], rows: List[List[str]],
                col_widths: Optional[List[int]] = None) -> None:
    """Print an ASCII table with right-aligned cells."""
    if col_widths is None:
        col_widths = [max(len(str(row[i])) for row in [headers] + rows) + 2
                      for i in range(len(headers))]

    separator = "+".join("-" * w for w in col_widths)
    print(f"+{separator}+")
    print("|" + "|".join(h.center(w) for h, w in zip(headers, col_widths)) + "|")
    print(f"+{separator}+")
    for row in rows:
        print("|" + "|".join(f"{cell} ".rjust(w) for cell, w in zip(row, col_widths)) + "|")
    print(f"+{separator}+")


# ============================================================================
# PROJECT SETUP
# ============================================================================

def create_default_project(library: DistributorLibrary) -> Project:
    """Default project with the reference distributor's tariffs applied."""
    project = Project(system=SystemData(distributor=DEFAULT_DISTRIBUTOR))
    project.tariffs = library.apply_tariffs(project.tariffs, DEFAULT_DISTRIBUTOR)
    return project


def apply_overrides(project: Project, args: argparse.Namespace,
                    library: DistributorLibrary) -> Project:
    """Apply command-line overrides to a project's inputs."""
    if args.name:
        project.name = args.name

    system_changes = {}
    if args.distributor:
        system_changes["distributor"] = args.distributor.upper()
    if args.power is not None:
        system_changes["power_dc_kwp"] = args.power
    if args.generation is not None:
        system_changes["annual_generation_mwh"] = args.generation
    if system_changes:
        project.system = replace(project.system, **system_changes)

    # Selecting a distributor pre-populates its reference tariffs
    if args.distributor and library.get_distributor(project.system.distributor) is not None:
        project.tariffs = library.apply_tariffs(project.tariffs, project.system.distributor)

    if args.capex_per_wp is not None:
        project.costs = replace(project.costs, capex_per_wp=args.capex_per_wp, capex_total=None)
    elif args.capex_total is not None:
        project.costs = replace(project.costs, capex_total=args.capex_total, capex_per_wp=None)

    financial_changes = {}
    if args.discount_rate is not None:
        financial_changes["discount_rate"] = args.discount_rate
    if args.adjustment_type:
        financial_changes["adjustment_type"] = args.adjustment_type
    if args.adjustment_rate is not None:
        financial_changes["adjustment_rate"] = args.adjustment_rate
    if args.degradation is not None:
        financial_changes["annual_degradation"] = args.degradation
    if args.default_rate is not None:
        financial_changes["default_rate"] = args.default_rate
    if args.years is not None:
        financial_changes["project_duration"] = args.years
    if financial_changes:
        project.financial = replace(project.financial, **financial_changes)

    return project


# ============================================================================
# DISPLAY FUNCTIONS
# ============================================================================

def print_distributors(library: DistributorLibrary) -> None:
    print_header("DISTRIBUTORS", "=")
    rows = []
    for d in library.get_distributors():
        tariffs = "reference" if library.has_reference_tariffs(d.id) else "default"
        rows.append([d.id, d.name[:40], d.state, tariffs])
    print_table(["ID", "Name", "UF", "Tariffs"], rows)
    source = library.metadata.get("source")
    if source:
        print(f"\nSource: {source}")


def print_project_summary(project: Project) -> None:
    """Display project configuration summary."""
    print_header("PROJECT CONFIGURATION", "=")

    system = project.system
    costs = project.costs
    tariffs = project.tariffs
    fin = project.financial

    print_subheader("System")
    print(f"  Project Name:      {project.name}")
    print(f"  Distributor:       {system.distributor or 'not selected'}")
    print(f"  DC Power:          {format_number(system.power_dc_kwp)} kWp")
    print(f"  Generation:        {format_energy(system.annual_generation_mwh)} / year")
    print(f"  Demand (gen/load): {format_number(system.contracted_demand_kw)} / "
          f"{format_number(system.load_demand_kw)} kW")

    print_subheader("Costs")
    if costs.capex_total is not None:
        print(f"  CAPEX:             {format_currency(costs.capex_total, 1)} total")
    elif costs.capex_per_wp is not None:
        print(f"  CAPEX:             R$ {format_number(costs.capex_per_wp, 2)}/Wp")
    print(f"  O&M / Insurance:   {format_percent(costs.om_percent)} / "
          f"{format_percent(costs.insurance_percent)} of investment")
    print(f"  Administration:    {format_percent(costs.adm_percent)} of revenue")
    print(f"  Rent:              R$ {format_number(costs.monthly_rent, 2)}/month")
    print(f"  Inverters:         {format_percent(costs.inverter_replacement_percent)} "
          f"in year {costs.inverter_replacement_year}")

    print_subheader("Tariffs")
    print(f"  TE / TUSD:         R$ {format_number(tariffs.energy_tariff, 2)} / "
          f"R$ {format_number(tariffs.distribution_tariff, 2)} per MWh")
    print(f"  TUSDg / TUSDc:     R$ {format_number(tariffs.generation_distribution_tariff, 2)} / "
          f"R$ {format_number(tariffs.consumption_distribution_tariff, 2)} per kW")
    print(f"  ICMS / PIS-COFINS: {format_percent(tariffs.icms_percent)} / "
          f"{format_percent(tariffs.pis_cofins_percent)}")

    print_subheader("Financial")
    print(f"  Discount Rate:     {format_percent(fin.discount_rate)}")
    print(f"  Adjustment:        {fin.adjustment_type.value} {format_percent(fin.adjustment_rate)}")
    print(f"  Degradation:       {format_percent(fin.annual_degradation)} / year")
    print(f"  Default Rate:      {format_percent(fin.default_rate)}")
    print(f"  Depreciation:      {fin.depreciation_years} years")
    print(f"  Duration:          {fin.project_duration} years")


def print_results(project: Project, results: CalculationResults) -> None:
    """Display financial metrics and the viability assessment."""
    print_header("FINANCIAL RESULTS", "=")
    viability = assess_viability(results)

    irr_text = format_percent(results.irr)
    if not results.irr_converged:
        irr_text += " (not converged)"

    metrics = [
        ("Initial Investment", format_currency(results.initial_investment, 1), ""),
        ("Net Present Value (NPV)", format_currency(results.npv, 1),
         "[+]" if results.npv > 0 else "[-]"),
        ("Internal Rate of Return", irr_text,
         "[+]" if results.irr > project.financial.discount_rate else ""),
        ("Payback", format_payback(results.payback_year, results.payback_achieved), ""),
        ("Return on Investment", format_percent(results.roi), ""),
        ("Viability Score", f"{viability.score}/100", viability.label),
    ]
    print()
    for name, value, indicator in metrics:
        print(f"  {name:<30} {value:>22} {indicator}")


def print_cash_flow_table(results: CalculationResults) -> None:
    print_subheader("ANNUAL CASH FLOWS")
    rows = []
    for y in results.yearly_results:
        rows.append([
            str(y.year),
            format_number(y.generation, 1),
            format_currency(y.revenue, 1),
            format_currency(y.total_costs, 1),
            format_currency(y.free_cash_flow, 1),
            format_currency(y.discounted_cash_flow, 1),
            format_currency(y.accumulated_cash_flow, 1),
        ])
    print_table(
        ["Year", "MWh", "Revenue", "Costs", "FCF", "DCF", "Accumulated"],
        rows, [6, 10, 13, 13, 13, 13, 14],
    )


def print_sensitivity_tables(project: Project) -> None:
    """Print NPV and IRR sensitivity to CAPEX and tariff levels."""
    print_header("SENSITIVITY ANALYSIS", "=")
    grid = calculate_sensitivity(project)

    columns = [f"{int(round(m * 100))}%" for m in grid.tariff_multipliers]

    print_subheader("NPV (rows: CAPEX, columns: tariffs)")
    rows = [
        [f"{int(round(m * 100))}%"] + [format_currency(v, 1) for v in grid.npv[i]]
        for i, m in enumerate(grid.capex_multipliers)
    ]
    print_table(["CAPEX"] + columns, rows)

    print_subheader("IRR (rows: CAPEX, columns: tariffs)")
    rows = [
        [f"{int(round(m * 100))}%"] + [format_percent(v) for v in grid.irr[i]]
        for i, m in enumerate(grid.capex_multipliers)
    ]
    print_table(["CAPEX"] + columns, rows)


# ============================================================================
# MAIN CLI
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GD Analyzer CLI - Distributed Solar Generation Financial Analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python gd_cli.py                                # Default 100 kWp project
  python gd_cli.py --distributor CEMIG            # Use CEMIG reference tariffs
  python gd_cli.py --power 500 --generation 750   # 500 kWp / 750 MWh per year
  python gd_cli.py --capex-total 2000000          # Total CAPEX instead of R$/Wp
  python gd_cli.py --scenario project.json        # Load inputs from JSON
  python gd_cli.py --report output.pdf            # Generate PDF report
  python gd_cli.py --excel                        # Export <name>_Financial_Analysis.xlsx
  python gd_cli.py --charts charts/               # Save PNG charts
  python gd_cli.py --sensitivity                  # Show sensitivity tables
  python gd_cli.py --list-distributors            # List known distributors
        """
    )

    # Project configuration
    parser.add_argument("--scenario", type=str,
                        help="Load project inputs from a JSON scenario file")
    parser.add_argument("--name", "-n", type=str, help="Project name")
    parser.add_argument("--distributor", "-d", type=str,
                        help=f"Distributor id (default: {DEFAULT_DISTRIBUTOR})")
    parser.add_argument("--power", type=float, help="DC power in kWp")
    parser.add_argument("--generation", type=float, help="Year-1 generation in MWh")
    capex = parser.add_mutually_exclusive_group()
    capex.add_argument("--capex-per-wp", type=float, help="CAPEX in R$/Wp")
    capex.add_argument("--capex-total", type=float, help="Total CAPEX in R$")
    parser.add_argument("--discount-rate", type=float,
                        help="Discount rate in percent (default: 10)")
    parser.add_argument("--adjustment-type", choices=["IPCA", "Energy"],
                        help="Readjustment index")
    parser.add_argument("--adjustment-rate", type=float,
                        help="Annual readjustment in percent (default: 4.5)")
    parser.add_argument("--degradation", type=float,
                        help="Annual degradation in percent (default: 0.8)")
    parser.add_argument("--default-rate", type=float,
                        help="Customer default rate in percent (default: 0)")
    parser.add_argument("--years", type=int, help="Project duration in years (default: 25)")

    # Outputs
    parser.add_argument("--report", type=str, nargs="?", const="GD_Report.pdf",
                        help="Generate PDF report (optional: specify filename)")
    parser.add_argument("--excel", type=str, nargs="?", const="",
                        help="Export to Excel workbook (optional: specify filename)")
    parser.add_argument("--charts", type=str, metavar="DIR",
                        help="Save PNG charts into DIR")

    # Display options
    parser.add_argument("--sensitivity", "-s", action="store_true",
                        help="Show sensitivity analysis tables")
    parser.add_argument("--list-distributors", action="store_true",
                        help="List distributors and exit")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress detailed output")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    library = DistributorLibrary()

    if args.list_distributors:
        print_distributors(library)
        return 0

    if args.scenario:
        try:
            project = load_scenario(args.scenario)
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            print(f"\nError loading scenario: {e}", file=sys.stderr)
            return 1
    else:
        project = create_default_project(library)

    project = apply_overrides(project, args, library)

    is_valid, messages = validate_project(project, library)
    for msg in messages:
        print(msg, file=sys.stderr)
    if not is_valid:
        print("\nInvalid inputs; analysis not run.", file=sys.stderr)
        return EXIT_VALIDATION_ERROR

    logger.debug("Running projection for '%s'", project.name)
    results = calculate_project_economics(project)

    if not args.quiet:
        print_project_summary(project)
        print_results(project, results)
        print_cash_flow_table(results)

    if args.sensitivity:
        print_sensitivity_tables(project)

    if args.report:
        try:
            generate_executive_summary(project, args.report, results)
            print(f"\nPDF report generated: {args.report}")
        except (OSError, ValueError) as e:
            print(f"\nError generating PDF: {e}")

    if args.excel is not None:
        try:
            path = export_to_excel(project, results, args.excel or None)
            print(f"\nExcel workbook generated: {path}")
        except (OSError, ValueError) as e:
            print(f"\nError generating Excel: {e}")

    if args.charts:
        try:
            paths = create_all_charts(results, args.charts)
            rates = [float(r) for r in range(0, 31)]
            profile_path = str(Path(args.charts) / "npv_profile.png")
            create_npv_profile_chart(
                rates, calculate_npv_profile(results.cash_flows, rates), results.irr, profile_path,
            )
            paths.append(profile_path)
            print(f"\nCharts saved: {', '.join(paths)}")
        except (OSError, ValueError) as e:
            print(f"\nError generating charts: {e}")

    if not args.quiet:
        viability = assess_viability(results)
        print_header("ANALYSIS COMPLETE", "=")
        print(f"\n  NPV: {format_currency(results.npv, 1)}  |  "
              f"IRR: {format_percent(results.irr)}  |  "
              f"Payback: {format_payback(results.payback_year, results.payback_achieved)}")
        print(f"\n  VIABILITY: {viability.label} ({viability.score}/100)")
        print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
