"""Spreadsheet export of a GD Analyzer projection.

Writes an .xlsx workbook with two sheets:
- Cash_Flows: one row per projected year with every YearResult field
- Summary: initial investment, NPV, IRR, payback year and ROI
"""

import logging
import math
import re
from pathlib import Path
from typing import Optional

import xlsxwriter

from gd_analyzer.models.project import CalculationResults, Project

logger = logging.getLogger(__name__)

CASH_FLOW_COLUMNS = [
    ("year", "Year", "int"),
    ("generation", "Generation (MWh)", "number"),
    ("revenue", "Revenue (R$)", "currency"),
    ("om_cost", "O&M (R$)", "currency"),
    ("insurance_cost", "Insurance (R$)", "currency"),
    ("adm_cost", "Administration (R$)", "currency"),
    ("rent_cost", "Rent (R$)", "currency"),
    ("inverter_cost", "Inverter Replacement (R$)", "currency"),
    ("icms_tax", "ICMS (R$)", "currency"),
    ("pis_cofins_tax", "PIS/COFINS (R$)", "currency"),
    ("depreciation", "Depreciation (R$)", "currency"),
    ("tax_benefit", "Tax Benefit (R$)", "currency"),
    ("free_cash_flow", "Free Cash Flow (R$)", "currency"),
    ("discounted_cash_flow", "Discounted Cash Flow (R$)", "currency"),
    ("accumulated_cash_flow", "Accumulated Cash Flow (R$)", "currency"),
]


def default_export_filename(project_name: str) -> str:
    """File name used when the caller gives none: '<name>_Financial_Analysis.xlsx'."""
    safe = re.sub(r'[\\/:*?"<>|]+', "_", project_name.strip()) or "Project"
    return f"{safe}_Financial_Analysis.xlsx"


def _create_formats(wb) -> dict:
    f = {}
    blue = '#1565C0'
    lblue = '#E3F2FD'

    f['title'] = wb.add_format({'bold': True, 'font_size': 14, 'font_color': blue})
    f['subtitle'] = wb.add_format({'italic': True, 'font_color': '#555555', 'font_size': 10})
    f['header'] = wb.add_format({'bold': True, 'font_color': 'white', 'bg_color': blue,
                                 'align': 'center', 'border': 1, 'valign': 'vcenter',
                                 'text_wrap': True})
    f['label'] = wb.add_format({'bold': True, 'border': 1})
    f['int'] = wb.add_format({'num_format': '0', 'border': 1, 'align': 'center'})
    f['number'] = wb.add_format({'num_format': '#,##0.00', 'border': 1})
    f['currency'] = wb.add_format({'num_format': '"R$" #,##0.00', 'border': 1})
    f['cur_red'] = wb.add_format({'num_format': '"R$" #,##0.00', 'border': 1,
                                  'font_color': '#C62828'})
    f['result_cur'] = wb.add_format({'bold': True, 'bg_color': lblue, 'border': 1,
                                     'num_format': '"R$" #,##0.00'})
    f['result_pct'] = wb.add_format({'bold': True, 'bg_color': lblue, 'border': 1,
                                     'num_format': '0.00"%"'})
    f['result_int'] = wb.add_format({'bold': True, 'bg_color': lblue, 'border': 1,
                                     'num_format': '0'})
    f['text'] = wb.add_format({'border': 1})
    return f


def _write_value(ws, row: int, col: int, value, fmt) -> None:
    # Excel has no NaN/inf; write them as text
    if isinstance(value, float) and not math.isfinite(value):
        ws.write_string(row, col, "N/A", fmt)
    else:
        ws.write_number(row, col, value, fmt)


def _create_cashflows_sheet(ws, f, results: CalculationResults) -> None:
    ws.set_row(0, 32)
    for col, (_, header, _) in enumerate(CASH_FLOW_COLUMNS):
        ws.write(0, col, header, f['header'])
        ws.set_column(col, col, 8 if col == 0 else 18)

    for row, year_result in enumerate(results.yearly_results, start=1):
        data = year_result.to_dict()
        for col, (key, _, kind) in enumerate(CASH_FLOW_COLUMNS):
            value = data[key]
            if kind == "currency" and value < 0:
                fmt = f['cur_red']
            else:
                fmt = f[kind]
            _write_value(ws, row, col, value, fmt)

    ws.freeze_panes(1, 1)


def _create_summary_sheet(ws, f, project: Project, results: CalculationResults) -> None:
    ws.set_column('A:A', 30)
    ws.set_column('B:B', 22)

    ws.write('A1', f"{project.name} - Financial Analysis", f['title'])
    ws.write('A2', f"Distributor: {project.system.distributor or 'not specified'}  |  "
                   f"Adjustment: {results.adjustment_type.value}", f['subtitle'])

    ws.write('A4', "Metric", f['header'])
    ws.write('B4', "Value", f['header'])

    rows = [
        ("Initial Investment (R$)", results.initial_investment, f['result_cur']),
        ("NPV (R$)", results.npv, f['result_cur']),
        ("IRR (%)", results.irr, f['result_pct']),
        ("Payback (years)", results.payback_year, f['result_int']),
        ("ROI (%)", results.roi, f['result_pct']),
    ]
    for offset, (label, value, fmt) in enumerate(rows):
        row = 4 + offset
        ws.write(row, 0, label, f['label'])
        _write_value(ws, row, 1, value, fmt)

    note_row = 4 + len(rows) + 1
    if not results.payback_achieved:
        ws.write(note_row, 0, "Payback not reached within the projection period", f['subtitle'])
        note_row += 1
    if not results.irr_converged:
        ws.write(note_row, 0, "IRR solver did not converge; value is the last estimate",
                 f['subtitle'])


def export_to_excel(
    project: Project,
    results: Optional[CalculationResults] = None,
    output_path: Optional[str] = None,
) -> str:
    """Write the projection to an .xlsx workbook.

    Args:
        project: Project whose name and inputs label the workbook.
        results: Results to export. Defaults to project.results.
        output_path: Destination path. Defaults to
            '<project name>_Financial_Analysis.xlsx' in the working directory.

    Returns:
        The path written.

    Raises:
        ValueError: If no results are available.
    """
    results = results if results is not None else project.results
    if results is None:
        raise ValueError("Project has no results to export; run the calculation first")

    path = Path(output_path) if output_path else Path(default_export_filename(project.name))

    workbook = xlsxwriter.Workbook(str(path))
    fmt = _create_formats(workbook)

    ws_cf = workbook.add_worksheet('Cash_Flows')
    ws_summary = workbook.add_worksheet('Summary')

    _create_cashflows_sheet(ws_cf, fmt, results)
    _create_summary_sheet(ws_summary, fmt, project, results)

    workbook.close()
    logger.info("Exported %d years to %s", len(results.yearly_results), path)
    return str(path)
