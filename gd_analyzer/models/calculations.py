"""Financial calculation engine for GD Analyzer.

Projects the yearly cash flows of a distributed solar generation project
under Brazilian regulated tariffs and derives NPV, IRR, payback year and
ROI. The engine is a pure function of its four input groups: it performs
no validation and no I/O, and degenerate inputs (zero depreciation horizon,
zero investment, extreme rates) yield NaN or infinite values rather than
exceptions.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from gd_analyzer.models.project import (
    CalculationResults,
    CostsData,
    FinancialParams,
    Project,
    SystemData,
    TariffsData,
    YearResult,
)

logger = logging.getLogger(__name__)

# IRPJ (25%) + CSLL (9%) applied to the depreciation tax shield
CORPORATE_TAX_RATE = 0.34

IRR_INITIAL_GUESS = 0.10
IRR_TOLERANCE = 1e-5
IRR_MAX_ITERATIONS = 1000


@dataclass(frozen=True)
class IRRSolution:
    """Outcome of the Newton-Raphson IRR search.

    Attributes:
        rate: IRR as a percentage (e.g., 10.0 for 10%). When the search did
            not converge this is the last guess, also as a percentage.
        converged: True if successive guesses moved less than the tolerance.
        iterations: Number of Newton steps taken.
    """

    rate: float
    converged: bool
    iterations: int


def solve_irr_detailed(cash_flows: Sequence[float]) -> IRRSolution:
    r"""Find the rate that zeroes NPV using Newton-Raphson iteration.

    Formula:
        f(r)  = CF_0 + \sum_{t=1}^{N} \frac{CF_t}{(1+r)^t}
        f'(r) = -\sum_{t=1}^{N} \frac{t \cdot CF_t}{(1+r)^{t+1}}
        r_{k+1} = r_k - f(r_k) / f'(r_k)

    Starts at r = 10% and stops when two guesses differ by less than 1e-5.
    There is no bracketing: series without a sign change, or with several,
    may diverge or settle on a meaningless root. After 1000 steps the last
    guess is returned with converged=False.

    Args:
        cash_flows: Year-0 outlay followed by yearly free cash flows.

    Returns:
        IRRSolution with the rate in percent.

    Example:
        >>> solve_irr_detailed([-1000, 1100]).rate
        10.0...
    """
    flows = np.asarray(cash_flows, dtype=np.float64)
    initial = flows[0] if flows.size else np.float64(0.0)
    later = flows[1:]
    periods = np.arange(1, flows.size, dtype=np.float64)

    guess = np.float64(IRR_INITIAL_GUESS)
    with np.errstate(all="ignore"):
        for iteration in range(1, IRR_MAX_ITERATIONS + 1):
            base = 1.0 + guess
            npv = initial + np.sum(later / base ** periods)
            derivative = -np.sum(periods * later / base ** (periods + 1.0))
            new_guess = guess - npv / derivative

            if abs(new_guess - guess) < IRR_TOLERANCE:
                return IRRSolution(
                    rate=float(new_guess * 100),
                    converged=True,
                    iterations=iteration,
                )
            guess = new_guess

    logger.warning(
        "IRR did not converge after %d iterations; returning last guess %.6f%%",
        IRR_MAX_ITERATIONS, float(guess * 100),
    )
    return IRRSolution(
        rate=float(guess * 100),
        converged=False,
        iterations=IRR_MAX_ITERATIONS,
    )


def solve_irr(cash_flows: Sequence[float]) -> float:
    """Return the IRR of a cash flow series as a percentage.

    Thin wrapper over solve_irr_detailed() that drops the convergence flag.
    """
    return solve_irr_detailed(cash_flows).rate


def calculate_initial_investment(system: SystemData, costs: CostsData) -> float:
    """Initial investment in R$.

    Uses the total CAPEX when set, otherwise R$/Wp times the DC rating
    (kWp converted to Wp). Returns 0 when neither CAPEX field is set.
    """
    if costs.capex_total is not None:
        return float(costs.capex_total)
    if costs.capex_per_wp is not None:
        return float(costs.capex_per_wp * system.power_dc_kwp * 1000)
    return 0.0


def calculate_financial_metrics(
    system: SystemData,
    costs: CostsData,
    tariffs: TariffsData,
    financial: FinancialParams,
) -> CalculationResults:
    """Run the year-by-year cash flow projection.

    For each year t = 1..N:

    - Generation decays geometrically: G_1 * (1 - d)^(t-1).
    - The escalation factor (1 + a)^(t-1) applies to energy and demand
      revenue, O&M, insurance and rent. The same factor is used for both
      adjustment types; the type is only recorded on the results.
    - Gross revenue is cut by the client discount and the default rate. The
      discount rate is also the time-value rate used to discount cash flows.
    - Administration, ICMS and PIS/COFINS are shares of gross revenue.
    - Straight-line depreciation yields a 34% tax benefit.
    - Inverter replacement is charged once, in the configured year.

    Args:
        system: System sizing inputs.
        costs: Cost inputs with exactly one CAPEX field set.
        tariffs: Tariff and tax inputs.
        financial: Financial parameters (rates in percent).

    Returns:
        CalculationResults with yearly results and aggregate metrics.
    """
    initial_investment = calculate_initial_investment(system, costs)
    n = int(financial.project_duration)

    inv = np.float64(initial_investment)
    degradation = np.float64(financial.annual_degradation) / 100
    adjustment = np.float64(financial.adjustment_rate) / 100
    discount = np.float64(financial.discount_rate) / 100
    default = np.float64(financial.default_rate) / 100

    tariff_energy = np.float64(tariffs.energy_tariff) + tariffs.distribution_tariff
    tariff_demand = (np.float64(tariffs.generation_distribution_tariff)
                     + tariffs.consumption_distribution_tariff)
    total_demand = np.float64(system.contracted_demand_kw) + system.load_demand_kw
    revenue_haircut = (1 - discount) * (1 - default)

    logger.debug(
        "Projecting %d years: initial investment R$ %.2f, adjustment %s",
        n, initial_investment, financial.adjustment_type.value,
    )

    yearly_results: List[YearResult] = []
    cash_flows: List[float] = [-initial_investment]
    accumulated = 0.0
    payback_year = n
    payback_found = False

    with np.errstate(all="ignore"):
        yearly_depreciation = inv / np.float64(financial.depreciation_years)

        for year in range(1, n + 1):
            generation = system.annual_generation_mwh * (1 - degradation) ** (year - 1)
            escalation = (1 + adjustment) ** (year - 1)

            energy_revenue = generation * tariff_energy * escalation
            demand_revenue = total_demand * tariff_demand * 12 * escalation
            revenue = (energy_revenue + demand_revenue) * revenue_haircut

            om_cost = inv * (costs.om_percent / 100) * escalation
            insurance_cost = inv * (costs.insurance_percent / 100) * escalation
            adm_cost = revenue * (costs.adm_percent / 100)
            rent_cost = np.float64(costs.monthly_rent) * 12 * escalation
            if year == costs.inverter_replacement_year:
                inverter_cost = inv * (costs.inverter_replacement_percent / 100)
            else:
                inverter_cost = np.float64(0.0)

            icms_tax = revenue * (tariffs.icms_percent / 100)
            pis_cofins_tax = revenue * (tariffs.pis_cofins_percent / 100)

            if year <= financial.depreciation_years:
                depreciation = yearly_depreciation
            else:
                depreciation = np.float64(0.0)
            tax_benefit = depreciation * CORPORATE_TAX_RATE

            free_cash_flow = (revenue - om_cost - insurance_cost - adm_cost
                              - rent_cost - icms_tax - pis_cofins_tax
                              + tax_benefit - inverter_cost)
            discounted_cash_flow = free_cash_flow / (1 + discount) ** year
            accumulated += float(free_cash_flow)

            if not payback_found and accumulated >= initial_investment:
                payback_year = year
                payback_found = True

            yearly_results.append(YearResult(
                year=year,
                generation=float(generation),
                revenue=float(revenue),
                om_cost=float(om_cost),
                insurance_cost=float(insurance_cost),
                adm_cost=float(adm_cost),
                rent_cost=float(rent_cost),
                inverter_cost=float(inverter_cost),
                icms_tax=float(icms_tax),
                pis_cofins_tax=float(pis_cofins_tax),
                depreciation=float(depreciation),
                tax_benefit=float(tax_benefit),
                free_cash_flow=float(free_cash_flow),
                discounted_cash_flow=float(discounted_cash_flow),
                accumulated_cash_flow=accumulated,
            ))
            cash_flows.append(float(free_cash_flow))

        npv = cash_flows[0] + sum(y.discounted_cash_flow for y in yearly_results)

        total_revenue = sum(y.revenue for y in yearly_results)
        total_costs = initial_investment + sum(y.total_costs for y in yearly_results)
        roi = float(np.float64(total_revenue - total_costs) / inv * 100)

    irr = solve_irr_detailed(cash_flows)

    logger.debug(
        "NPV R$ %.2f, IRR %.4f%% (converged=%s), payback year %d, ROI %.2f%%",
        npv, irr.rate, irr.converged, payback_year, roi,
    )

    return CalculationResults(
        yearly_results=tuple(yearly_results),
        cash_flows=tuple(cash_flows),
        initial_investment=initial_investment,
        npv=float(npv),
        irr=irr.rate,
        irr_converged=irr.converged,
        irr_iterations=irr.iterations,
        payback_year=payback_year,
        payback_achieved=payback_found,
        roi=roi,
        adjustment_type=financial.adjustment_type,
    )


def calculate_project_economics(project: Project) -> CalculationResults:
    """Run the projection for a Project and store the results on it.

    Args:
        project: Project with all four input groups populated.

    Returns:
        The CalculationResults, also assigned to project.results.
    """
    results = calculate_financial_metrics(
        project.system, project.costs, project.tariffs, project.financial,
    )
    project.results = results
    return results
