"""Sensitivity analysis for GD Analyzer.

Re-runs the projection over a grid of CAPEX and tariff multipliers, and
traces the NPV profile of a fixed cash flow series across discount rates.
"""

from dataclasses import dataclass, field, replace
from typing import List, Sequence

import numpy as np
import numpy_financial as npf

from gd_analyzer.models.calculations import calculate_financial_metrics
from gd_analyzer.models.project import CostsData, Project, TariffsData

DEFAULT_CAPEX_MULTIPLIERS = [0.8, 0.9, 1.0, 1.1, 1.2]
DEFAULT_TARIFF_MULTIPLIERS = [0.8, 0.9, 1.0, 1.1, 1.2]


@dataclass
class SensitivityGrid:
    """NPV and IRR tables indexed [capex_index][tariff_index].

    Attributes:
        capex_multipliers: Row factors applied to the active CAPEX field.
        tariff_multipliers: Column factors applied to TE, TUSD, TUSDg and TUSDc.
        npv: NPV (R$) for each combination.
        irr: IRR (%) for each combination.
    """

    capex_multipliers: List[float] = field(default_factory=list)
    tariff_multipliers: List[float] = field(default_factory=list)
    npv: List[List[float]] = field(default_factory=list)
    irr: List[List[float]] = field(default_factory=list)


def scale_capex(costs: CostsData, multiplier: float) -> CostsData:
    """Scale whichever CAPEX field is active."""
    if costs.capex_total is not None:
        return replace(costs, capex_total=costs.capex_total * multiplier)
    if costs.capex_per_wp is not None:
        return replace(costs, capex_per_wp=costs.capex_per_wp * multiplier)
    return costs


def scale_tariffs(tariffs: TariffsData, multiplier: float) -> TariffsData:
    """Scale the four tariff components; tax percentages are unchanged."""
    return replace(
        tariffs,
        energy_tariff=tariffs.energy_tariff * multiplier,
        distribution_tariff=tariffs.distribution_tariff * multiplier,
        generation_distribution_tariff=tariffs.generation_distribution_tariff * multiplier,
        consumption_distribution_tariff=tariffs.consumption_distribution_tariff * multiplier,
    )


def calculate_sensitivity(
    project: Project,
    capex_multipliers: Sequence[float] = DEFAULT_CAPEX_MULTIPLIERS,
    tariff_multipliers: Sequence[float] = DEFAULT_TARIFF_MULTIPLIERS,
) -> SensitivityGrid:
    """Calculate NPV and IRR sensitivity tables.

    Each cell is a full re-run of the projection, so escalation, taxes and
    depreciation respond to the changed inputs.

    Args:
        project: Base project to analyze (not modified).
        capex_multipliers: CAPEX scaling factors (1.0 = base case).
        tariff_multipliers: Tariff scaling factors (1.0 = base case).

    Returns:
        SensitivityGrid with 'npv' and 'irr' matrices.
    """
    grid = SensitivityGrid(
        capex_multipliers=list(capex_multipliers),
        tariff_multipliers=list(tariff_multipliers),
    )
    for capex_mult in capex_multipliers:
        costs = scale_capex(project.costs, capex_mult)
        npv_row = []
        irr_row = []
        for tariff_mult in tariff_multipliers:
            tariffs = scale_tariffs(project.tariffs, tariff_mult)
            results = calculate_financial_metrics(project.system, costs, tariffs, project.financial)
            npv_row.append(results.npv)
            irr_row.append(results.irr)
        grid.npv.append(npv_row)
        grid.irr.append(irr_row)
    return grid


def calculate_npv_profile(cash_flows: Sequence[float], rates_percent: Sequence[float]) -> List[float]:
    r"""NPV of a fixed cash flow series at each discount rate.

    Formula:
        NPV(r) = \sum_{t=0}^{N} \frac{CF_t}{(1+r)^t}

    The series is held fixed, so the revenue haircut that the projection
    derives from the discount rate is not re-applied. The curve crosses
    zero at the IRR.

    Args:
        cash_flows: Series starting at year 0 (as in CalculationResults.cash_flows).
        rates_percent: Discount rates in percent.

    Returns:
        NPV values (R$), one per rate.
    """
    values = np.asarray(cash_flows, dtype=float)
    return [float(npf.npv(rate / 100, values)) for rate in rates_percent]
