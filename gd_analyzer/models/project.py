"""Data models for GD Analyzer projects.

Defines dataclasses for the four input groups of a distributed generation
(GD) investment analysis: system sizing, costs, regulated tariffs and
financial parameters, plus the per-year and aggregate results produced by
the calculation engine. Inputs are frozen so a single snapshot can be passed
to the engine repeatedly. All models support JSON serialization via
to_dict()/from_dict() methods.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Tuple


class AdjustmentType(Enum):
    """Annual readjustment index applied to revenue and cost lines.

    IPCA is the Brazilian consumer price index; ENERGY follows the
    distributor's energy tariff readjustment.
    """

    IPCA = "IPCA"
    ENERGY = "Energy"

    @classmethod
    def from_value(cls, value) -> "AdjustmentType":
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).lower() in (member.value.lower(), member.name.lower()):
                return member
        raise ValueError(f"adjustment_type must be 'IPCA' or 'Energy', got {value!r}")


class CapexMode(Enum):
    """How CAPEX was entered: per installed Wp or as a project total."""

    PER_WP = "per_wp"
    TOTAL = "total"

    @classmethod
    def from_value(cls, value) -> "CapexMode":
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).lower() in (member.value, member.name.lower()):
                return member
        raise ValueError(f"capex_mode must be 'per_wp' or 'total', got {value!r}")


@dataclass(frozen=True)
class SystemData:
    """Photovoltaic system sizing and grid connection.

    Attributes:
        power_dc_kwp: DC power rating in kWp.
        annual_generation_mwh: Expected year-1 generation in MWh.
        contracted_demand_kw: Contracted demand for generation (kW).
        load_demand_kw: Contracted demand for load (kW).
        distributor: Distributor identifier (e.g., "CEMIG").
    """

    power_dc_kwp: float = 100.0
    annual_generation_mwh: float = 150.0
    contracted_demand_kw: float = 80.0
    load_demand_kw: float = 100.0
    distributor: str = ""

    def to_dict(self) -> dict:
        return {
            "power_dc_kwp": self.power_dc_kwp,
            "annual_generation_mwh": self.annual_generation_mwh,
            "contracted_demand_kw": self.contracted_demand_kw,
            "load_demand_kw": self.load_demand_kw,
            "distributor": self.distributor,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SystemData":
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


@dataclass(frozen=True)
class CostsData:
    """Capital and operating cost parameters.

    Exactly one of capex_per_wp / capex_total is expected to be set when the
    engine runs; use for_capex_mode() to null out the inactive field.

    Attributes:
        capex_per_wp: Installed cost per Wp (R$/Wp), or None.
        capex_total: Total installed cost (R$), or None.
        insurance_percent: Annual insurance as % of initial investment.
        om_percent: Annual O&M as % of initial investment.
        adm_percent: Administration as % of gross revenue.
        monthly_rent: Site rent in R$/month (year-1 value).
        inverter_replacement_percent: Inverter replacement cost as % of
            initial investment.
        inverter_replacement_year: Project year in which inverters are replaced.
    """

    capex_per_wp: Optional[float] = 4.5
    capex_total: Optional[float] = None
    insurance_percent: float = 0.5
    om_percent: float = 1.0
    adm_percent: float = 3.0
    monthly_rent: float = 1000.0
    inverter_replacement_percent: float = 15.0
    inverter_replacement_year: int = 10

    @property
    def capex_mode(self) -> Optional[CapexMode]:
        """Active CAPEX input mode, or None if neither field is set."""
        if self.capex_total is not None:
            return CapexMode.TOTAL
        if self.capex_per_wp is not None:
            return CapexMode.PER_WP
        return None

    def for_capex_mode(self, mode) -> "CostsData":
        """Return a copy keeping only the CAPEX field of the given mode."""
        mode = CapexMode.from_value(mode)
        if mode is CapexMode.PER_WP:
            return replace(self, capex_total=None)
        return replace(self, capex_per_wp=None)

    def to_dict(self) -> dict:
        return {
            "capex_per_wp": self.capex_per_wp,
            "capex_total": self.capex_total,
            "insurance_percent": self.insurance_percent,
            "om_percent": self.om_percent,
            "adm_percent": self.adm_percent,
            "monthly_rent": self.monthly_rent,
            "inverter_replacement_percent": self.inverter_replacement_percent,
            "inverter_replacement_year": self.inverter_replacement_year,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CostsData":
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


@dataclass(frozen=True)
class TariffsData:
    """Regulated tariff components and revenue taxes.

    Attributes:
        energy_tariff: TE, energy tariff (R$/MWh).
        distribution_tariff: TUSD, distribution usage tariff (R$/MWh).
        generation_distribution_tariff: TUSDg, generation demand tariff (R$/kW).
        consumption_distribution_tariff: TUSDc, consumption demand tariff (R$/kW).
        icms_percent: ICMS value-added tax (%).
        pis_cofins_percent: PIS/COFINS turnover tax (%).
    """

    energy_tariff: float = 350.0
    distribution_tariff: float = 250.0
    generation_distribution_tariff: float = 10.0
    consumption_distribution_tariff: float = 15.0
    icms_percent: float = 18.0
    pis_cofins_percent: float = 9.25

    def to_dict(self) -> dict:
        return {
            "energy_tariff": self.energy_tariff,
            "distribution_tariff": self.distribution_tariff,
            "generation_distribution_tariff": self.generation_distribution_tariff,
            "consumption_distribution_tariff": self.consumption_distribution_tariff,
            "icms_percent": self.icms_percent,
            "pis_cofins_percent": self.pis_cofins_percent,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TariffsData":
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


@dataclass(frozen=True)
class FinancialParams:
    """Financial and projection parameters. All rates are in percent.

    Attributes:
        discount_rate: Client discount on revenue and NPV discount rate (%).
        adjustment_type: Readjustment index (recorded, see AdjustmentType).
        adjustment_rate: Annual escalation of revenue and costs (%).
        annual_degradation: Annual generation loss (%).
        depreciation_years: Straight-line depreciation horizon.
        project_duration: Number of projected years.
        default_rate: Customer delinquency haircut on revenue (%).
    """

    discount_rate: float = 10.0
    adjustment_type: AdjustmentType = AdjustmentType.IPCA
    adjustment_rate: float = 4.5
    annual_degradation: float = 0.8
    depreciation_years: int = 10
    project_duration: int = 25
    default_rate: float = 0.0

    def __post_init__(self):
        if not isinstance(self.adjustment_type, AdjustmentType):
            object.__setattr__(
                self, "adjustment_type", AdjustmentType.from_value(self.adjustment_type)
            )

    def to_dict(self) -> dict:
        return {
            "discount_rate": self.discount_rate,
            "adjustment_type": self.adjustment_type.value,
            "adjustment_rate": self.adjustment_rate,
            "annual_degradation": self.annual_degradation,
            "depreciation_years": self.depreciation_years,
            "project_duration": self.project_duration,
            "default_rate": self.default_rate,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FinancialParams":
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)


@dataclass(frozen=True)
class YearResult:
    """Projected figures for a single year. Currency values in R$."""

    year: int
    generation: float
    revenue: float
    om_cost: float
    insurance_cost: float
    adm_cost: float
    rent_cost: float
    inverter_cost: float
    icms_tax: float
    pis_cofins_tax: float
    depreciation: float
    tax_benefit: float
    free_cash_flow: float
    discounted_cash_flow: float
    accumulated_cash_flow: float

    @property
    def total_costs(self) -> float:
        """Operating costs, taxes and inverter replacement for the year."""
        return (self.om_cost + self.insurance_cost + self.adm_cost + self.rent_cost
                + self.icms_tax + self.pis_cofins_tax + self.inverter_cost)

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "generation": self.generation,
            "revenue": self.revenue,
            "om_cost": self.om_cost,
            "insurance_cost": self.insurance_cost,
            "adm_cost": self.adm_cost,
            "rent_cost": self.rent_cost,
            "inverter_cost": self.inverter_cost,
            "icms_tax": self.icms_tax,
            "pis_cofins_tax": self.pis_cofins_tax,
            "depreciation": self.depreciation,
            "tax_benefit": self.tax_benefit,
            "free_cash_flow": self.free_cash_flow,
            "discounted_cash_flow": self.discounted_cash_flow,
            "accumulated_cash_flow": self.accumulated_cash_flow,
        }


@dataclass(frozen=True)
class CalculationResults:
    """Year-by-year projection plus aggregate investment metrics.

    Attributes:
        yearly_results: One YearResult per projected year, chronological.
        cash_flows: Series handed to the IRR solver
            ([-initial_investment, fcf_1, ..., fcf_n]).
        initial_investment: Initial investment (R$).
        npv: Net present value (R$).
        irr: Internal rate of return (%). Last Newton guess if not converged.
        irr_converged: False when the solver hit its iteration cap.
        irr_iterations: Newton iterations performed.
        payback_year: First year the accumulated cash flow covers the
            investment, or project_duration when it never does.
        payback_achieved: Whether the payback year was actually reached.
        roi: Return on investment over the projection (%).
        adjustment_type: Readjustment index recorded from the inputs.
    """

    yearly_results: Tuple[YearResult, ...] = ()
    cash_flows: Tuple[float, ...] = ()
    initial_investment: float = 0.0
    npv: float = 0.0
    irr: float = 0.0
    irr_converged: bool = True
    irr_iterations: int = 0
    payback_year: int = 0
    payback_achieved: bool = False
    roi: float = 0.0
    adjustment_type: AdjustmentType = AdjustmentType.IPCA

    @property
    def total_revenue(self) -> float:
        return sum(y.revenue for y in self.yearly_results)

    @property
    def total_costs(self) -> float:
        """Sum of every cost and tax line across the projection."""
        return sum(y.total_costs for y in self.yearly_results)

    def to_dict(self) -> dict:
        return {
            "yearly_results": [y.to_dict() for y in self.yearly_results],
            "cash_flows": list(self.cash_flows),
            "initial_investment": self.initial_investment,
            "npv": self.npv,
            "irr": self.irr,
            "irr_converged": self.irr_converged,
            "irr_iterations": self.irr_iterations,
            "payback_year": self.payback_year,
            "payback_achieved": self.payback_achieved,
            "roi": self.roi,
            "adjustment_type": self.adjustment_type.value,
        }


@dataclass
class Project:
    """A named analysis: the four input groups and, once run, its results.

    Attributes:
        name: Project name used in reports and export file names.
        system: System sizing inputs.
        costs: Cost inputs.
        tariffs: Tariff inputs.
        financial: Financial parameters.
        results: Calculated results (populated after analysis).
    """

    name: str = "Novo Projeto GD"
    system: SystemData = field(default_factory=SystemData)
    costs: CostsData = field(default_factory=CostsData)
    tariffs: TariffsData = field(default_factory=TariffsData)
    financial: FinancialParams = field(default_factory=FinancialParams)
    results: Optional[CalculationResults] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "system": self.system.to_dict(),
            "costs": self.costs.to_dict(),
            "tariffs": self.tariffs.to_dict(),
            "financial": self.financial.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Project":
        costs = CostsData.from_dict(data.get("costs", {}))
        if data.get("capex_mode"):
            costs = costs.for_capex_mode(data["capex_mode"])
        return cls(
            name=data.get("name", "Novo Projeto GD"),
            system=SystemData.from_dict(data.get("system", {})),
            costs=costs,
            tariffs=TariffsData.from_dict(data.get("tariffs", {})),
            financial=FinancialParams.from_dict(data.get("financial", {})),
        )
