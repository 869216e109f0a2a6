"""Input validation functions for GD Analyzer.

The calculation engine accepts any numeric input; these checks run before
it, on the caller's side. Each validator returns a tuple of
(is_valid: bool, message: str). Messages describe errors or warnings for
user display.
"""

from typing import List, Optional, Tuple

from gd_analyzer.data.distributors import DistributorLibrary
from gd_analyzer.models.project import CapexMode, CostsData, Project


def validate_power_dc(power_dc_kwp: float) -> Tuple[bool, str]:
    """Validate DC power rating in kWp.

    Args:
        power_dc_kwp: System DC rating.

    Returns:
        (is_valid, message) tuple.
    """
    if power_dc_kwp <= 0:
        return False, "DC power must be greater than 0 kWp."
    if power_dc_kwp > 5000:
        return True, (f"Warning: {power_dc_kwp:,.0f} kWp exceeds the 5 MW distributed "
                      "generation limit. Verify this is correct.")
    return True, ""


def validate_annual_generation(annual_generation_mwh: float, power_dc_kwp: float = 0.0) -> Tuple[bool, str]:
    """Validate expected annual generation in MWh.

    When the DC rating is given, also warns if the implied specific yield
    (kWh/kWp per year) is outside the usual Brazilian range.
    """
    if annual_generation_mwh <= 0:
        return False, "Annual generation must be greater than 0 MWh."
    if power_dc_kwp > 0:
        specific_yield = annual_generation_mwh * 1000 / power_dc_kwp
        if specific_yield < 900 or specific_yield > 2200:
            return True, (f"Warning: specific yield of {specific_yield:,.0f} kWh/kWp/year "
                          "is unusual for Brazil.")
    return True, ""


def validate_distributor(distributor_id: str, library: Optional[DistributorLibrary] = None) -> Tuple[bool, str]:
    """Validate that a distributor is selected and, if a library is given, known."""
    if not distributor_id or not distributor_id.strip():
        return False, "Select a distributor."
    if library is not None and library.get_distributor(distributor_id) is None:
        return False, f"Unknown distributor '{distributor_id}'."
    return True, ""


def validate_capex(costs: CostsData) -> Tuple[bool, str]:
    """Validate the active CAPEX field.

    Exactly one of capex_per_wp / capex_total must be set, and it must be
    positive.
    """
    if costs.capex_per_wp is not None and costs.capex_total is not None:
        return False, "Set either CAPEX per Wp or total CAPEX, not both."
    mode = costs.capex_mode
    if mode is None:
        return False, "CAPEX is required."
    if mode is CapexMode.PER_WP:
        if costs.capex_per_wp <= 0:
            return False, "CAPEX per Wp must be greater than zero."
        if costs.capex_per_wp > 10:
            return True, f"Warning: R$ {costs.capex_per_wp:.2f}/Wp is above the current market range."
        return True, ""
    if costs.capex_total <= 0:
        return False, "Total CAPEX must be greater than zero."
    return True, ""


def validate_degradation(annual_degradation: float) -> Tuple[bool, str]:
    """Validate annual degradation (%)."""
    if annual_degradation < 0 or annual_degradation > 100:
        return False, "Degradation rate must be between 0 and 100%."
    if annual_degradation > 3:
        return True, f"Warning: {annual_degradation:.2f}% annual degradation is unusually high."
    return True, ""


def validate_project_duration(project_duration: int) -> Tuple[bool, str]:
    if project_duration < 1:
        return False, "Project duration must be at least 1 year."
    if project_duration > 30:
        return True, f"Warning: {project_duration} years exceeds the usual 30-year horizon."
    return True, ""


def validate_depreciation_years(depreciation_years: int) -> Tuple[bool, str]:
    if depreciation_years < 1:
        return True, "Warning: depreciation horizon below 1 year; no tax benefit will be applied."
    return True, ""


def validate_inverter_year(inverter_year: int, project_duration: int) -> Tuple[bool, str]:
    if inverter_year < 1 or inverter_year > project_duration:
        return True, (f"Warning: inverter replacement year {inverter_year} is outside the "
                      f"1-{project_duration} projection; no replacement cost will be charged.")
    return True, ""


def validate_project(project: Project, library: Optional[DistributorLibrary] = None) -> Tuple[bool, List[str]]:
    """Run all validations on a complete project.

    Args:
        project: Project to validate.
        library: Distributor library used to check the distributor id.

    Returns:
        (is_valid, messages) where messages includes all errors and warnings.
    """
    messages = []
    is_valid = True

    system = project.system
    financial = project.financial
    checks = [
        validate_power_dc(system.power_dc_kwp),
        validate_annual_generation(system.annual_generation_mwh, system.power_dc_kwp),
        validate_distributor(system.distributor, library),
        validate_capex(project.costs),
        validate_degradation(financial.annual_degradation),
        validate_project_duration(financial.project_duration),
        validate_depreciation_years(financial.depreciation_years),
        validate_inverter_year(project.costs.inverter_replacement_year, financial.project_duration),
    ]

    for valid, msg in checks:
        if not valid:
            is_valid = False
        if msg:
            messages.append(msg)

    if not project.name.strip():
        messages.append("Warning: Project name is empty.")

    return is_valid, messages
