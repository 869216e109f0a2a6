"""Executive summary PDF report generation using ReportLab.

Generates a short PDF containing the project overview, key financial
metrics with a viability assessment, cost and tax totals, cash flow charts
and methodology notes.
"""

import tempfile
from pathlib import Path
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Image,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from gd_analyzer.models.calculations import CORPORATE_TAX_RATE
from gd_analyzer.models.project import CalculationResults, Project
from gd_analyzer.models.viability import assess_viability
from gd_analyzer.reports.charts import (
    create_accumulated_chart,
    create_cashflow_chart,
    create_generation_chart,
)
from gd_analyzer.utils.formatters import (
    format_currency,
    format_currency_exact,
    format_energy,
    format_number,
    format_payback,
    format_percent,
)

HEADER_COLOR = colors.HexColor("#1565c0")

_LABEL_COLORS = {
    "Excellent": colors.green,
    "Good": colors.HexColor("#2e7d32"),
    "Fair": colors.orange,
    "Risky": colors.red,
}


def _get_recommendation(label: str) -> tuple:
    """Return recommendation text and color for a viability label."""
    if label in ("Excellent", "Good"):
        text = "ATTRACTIVE - Returns exceed the required rate"
    elif label == "Fair":
        text = "FURTHER STUDY - Marginal economics"
    else:
        text = "NOT RECOMMENDED - Investment is not recovered on acceptable terms"
    return text, _LABEL_COLORS.get(label, colors.black)


def _grid_style(header_bg) -> TableStyle:
    return TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BACKGROUND", (0, 0), (-1, 0), header_bg),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ("TOPPADDING", (0, 0), (-1, -1), 5),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
    ])


def generate_executive_summary(
    project: Project,
    output_path: str,
    results: Optional[CalculationResults] = None,
) -> None:
    """Generate an executive summary PDF report.

    Page 1 holds the project overview, key metrics and recommendation;
    page 2 the cost and tax totals with charts; page 3 the methodology.

    Args:
        project: Project with all inputs populated.
        output_path: File path for the output PDF.
        results: Calculated results. Defaults to project.results.

    Raises:
        ValueError: If no results are available.
    """
    results = results if results is not None else project.results
    if results is None:
        raise ValueError("Project has no results to report; run the calculation first")

    doc = SimpleDocTemplate(
        output_path,
        pagesize=A4,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], fontSize=18, spaceAfter=6)
    heading_style = ParagraphStyle(
        "ReportHeading", parent=styles["Heading2"], fontSize=14,
        spaceAfter=8, spaceBefore=12, textColor=HEADER_COLOR,
    )
    body_style = styles["Normal"]
    small_style = ParagraphStyle("Small", parent=body_style, fontSize=8, textColor=colors.grey)

    system = project.system
    financial = project.financial
    viability = assess_viability(results)

    elements = []

    # Page 1
    elements.append(Paragraph("Distributed Generation Financial Analysis", title_style))
    elements.append(Paragraph("Executive Summary", styles["Heading3"]))
    elements.append(Spacer(1, 12))

    info_data = [
        ["Project Name", project.name or "Unnamed"],
        ["Distributor", system.distributor or "Not specified"],
        ["DC Power", f"{format_number(system.power_dc_kwp, 1)} kWp"],
        ["Year-1 Generation", format_energy(system.annual_generation_mwh)],
        ["Initial Investment", format_currency_exact(results.initial_investment)],
        ["Project Duration", f"{financial.project_duration} years"],
        ["Discount Rate", format_percent(financial.discount_rate)],
        ["Adjustment", f"{results.adjustment_type.value} "
                       f"{format_percent(financial.adjustment_rate)} per year"],
    ]
    info_table = Table(info_data, colWidths=[2.5 * inch, 4.0 * inch])
    info_table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("LINEBELOW", (0, -1), (-1, -1), 1, colors.grey),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 16))

    elements.append(Paragraph("Key Financial Metrics", heading_style))
    irr_note = "" if results.irr_converged else " (not converged)"
    metrics_data = [
        ["Metric", "Value", "Assessment"],
        ["Net Present Value (NPV)", format_currency(results.npv, decimals=1),
         "Positive" if results.npv > 0 else "Negative"],
        ["Internal Rate of Return", format_percent(results.irr) + irr_note,
         f"{'>' if results.irr > financial.discount_rate else '<='} discount rate"],
        ["Payback", format_payback(results.payback_year, results.payback_achieved),
         "Within project" if results.payback_achieved else "Not reached"],
        ["Return on Investment", format_percent(results.roi), ""],
        ["Viability Score", f"{viability.score}/100", viability.label],
    ]
    metrics_table = Table(metrics_data, colWidths=[2.4 * inch, 2.1 * inch, 2.0 * inch])
    metrics_style = _grid_style(HEADER_COLOR)
    metrics_style.add("TEXTCOLOR", (0, 0), (-1, 0), colors.white)
    metrics_style.add("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f5f5f5")])
    metrics_table.setStyle(metrics_style)
    elements.append(metrics_table)
    elements.append(Spacer(1, 12))

    rec_text, rec_color = _get_recommendation(viability.label)
    rec_style = ParagraphStyle("Recommendation", parent=body_style, textColor=rec_color)
    elements.append(Paragraph(f"<b>Recommendation:</b> {rec_text}", rec_style))

    # Page 2
    elements.append(PageBreak())
    elements.append(Paragraph("Costs and Taxes over the Project", heading_style))

    years = results.yearly_results
    totals = [
        ["Item", "Total (R$)"],
        ["Gross Revenue", format_currency_exact(results.total_revenue)],
        ["O&M", format_currency_exact(sum(y.om_cost for y in years))],
        ["Insurance", format_currency_exact(sum(y.insurance_cost for y in years))],
        ["Administration", format_currency_exact(sum(y.adm_cost for y in years))],
        ["Rent", format_currency_exact(sum(y.rent_cost for y in years))],
        ["Inverter Replacement", format_currency_exact(sum(y.inverter_cost for y in years))],
        ["ICMS", format_currency_exact(sum(y.icms_tax for y in years))],
        ["PIS/COFINS", format_currency_exact(sum(y.pis_cofins_tax for y in years))],
        ["Depreciation Tax Benefit", format_currency_exact(sum(y.tax_benefit for y in years))],
        ["Total Costs and Taxes", format_currency_exact(results.total_costs)],
    ]
    cost_table = Table(totals, colWidths=[3.5 * inch, 3.0 * inch])
    cost_style = _grid_style(colors.HexColor("#e0e0e0"))
    cost_style.add("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold")
    cost_table.setStyle(cost_style)
    elements.append(cost_table)
    elements.append(Spacer(1, 12))

    with tempfile.TemporaryDirectory() as tmpdir:
        cf_path = str(Path(tmpdir) / "cash_flow.png")
        acc_path = str(Path(tmpdir) / "accumulated.png")
        gen_path = str(Path(tmpdir) / "generation.png")

        if years:
            create_cashflow_chart(years, cf_path)
            elements.append(Image(cf_path, width=6.0 * inch, height=3.4 * inch))

            elements.append(PageBreak())
            elements.append(Paragraph("Return and Generation", heading_style))
            create_accumulated_chart(years, results.initial_investment, acc_path)
            elements.append(Image(acc_path, width=6.0 * inch, height=3.4 * inch))
            create_generation_chart(years, gen_path)
            elements.append(Image(gen_path, width=6.0 * inch, height=3.0 * inch))

        # Page 3
        elements.append(PageBreak())
        elements.append(Paragraph("Methodology & Assumptions", heading_style))
        method_text = (
            f"Cash flows are projected year by year over {financial.project_duration} years. "
            f"Generation decays by {format_percent(financial.annual_degradation)} per year and "
            f"revenue and operating costs escalate by "
            f"{format_percent(financial.adjustment_rate)} per year "
            f"({results.adjustment_type.value}).<br/><br/>"
            f"Revenue combines energy (TE + TUSD per MWh) and demand (TUSDg + TUSDc per kW, "
            f"12 months) components, reduced by the client discount of "
            f"{format_percent(financial.discount_rate)} and a default rate of "
            f"{format_percent(financial.default_rate)}. ICMS and PIS/COFINS are charged on "
            f"revenue. The investment is depreciated straight-line over "
            f"{financial.depreciation_years} years with a "
            f"{format_percent(CORPORATE_TAX_RATE * 100, 0)} tax benefit.<br/><br/>"
            f"<b>Key Formulas:</b><br/>"
            f"&bull; DCF_t = FCF_t / (1+r)^t<br/>"
            f"&bull; NPV = -Investment + Sum of DCF_t for t = 1 to N<br/>"
            f"&bull; IRR = rate where NPV = 0 (Newton-Raphson from 10%)<br/>"
            f"&bull; ROI = (Revenue - Investment - Costs) / Investment<br/>"
            f"&bull; Payback = first year accumulated FCF reaches the investment<br/>"
        )
        elements.append(Paragraph(method_text, body_style))
        elements.append(Spacer(1, 20))
        elements.append(Paragraph(
            "<i>Report generated by GD Analyzer. All figures are reproducible from the "
            "documented inputs and methodology above.</i>",
            small_style,
        ))

        # Build while tmpdir exists for chart images
        doc.build(elements)
