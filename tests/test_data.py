"""Tests for distributor reference data, input validation and scenario loading."""

import json

import pytest

from gd_analyzer.data.distributors import DEFAULT_TARIFF_KEY, DistributorLibrary
from gd_analyzer.data.scenarios import load_scenario
from gd_analyzer.data.validators import (
    validate_annual_generation,
    validate_capex,
    validate_degradation,
    validate_depreciation_years,
    validate_distributor,
    validate_inverter_year,
    validate_power_dc,
    validate_project,
    validate_project_duration,
)
from gd_analyzer.models.project import (
    AdjustmentType,
    CapexMode,
    CostsData,
    Project,
    SystemData,
    TariffsData,
)


@pytest.fixture(scope="module")
def library():
    return DistributorLibrary()


# ---- Distributor Library Tests ----

class TestDistributorLibrary:
    def test_loads_all_distributors(self, library):
        assert len(library.get_distributors()) == 31

    def test_sorted_by_name(self, library):
        names = [d.name.casefold() for d in library.get_distributors()]
        assert names == sorted(names)

    def test_get_distributor(self, library):
        cemig = library.get_distributor("CEMIG")
        assert cemig is not None
        assert cemig.state == "MG"
        assert library.get_distributor("NOPE") is None

    def test_by_state(self, library):
        ids = {d.id for d in library.get_distributors_by_state("sp")}
        assert ids == {"CPFL", "ENEL-SP", "EDP-SP", "ELEKTRO"}

    def test_reference_tariffs(self, library):
        tariffs = library.get_default_tariffs("CEMIG")
        assert tariffs == {
            "energy_tariff": 380.0,
            "distribution_tariff": 260.0,
            "generation_distribution_tariff": 12.0,
            "consumption_distribution_tariff": 16.0,
        }

    def test_fallback_to_default(self, library, caplog):
        with caplog.at_level("WARNING", logger="gd_analyzer.data.distributors"):
            tariffs = library.get_default_tariffs("COPEL")
        assert tariffs["energy_tariff"] == 350.0
        assert "COPEL" in caplog.text
        assert not library.has_reference_tariffs("COPEL")
        assert not library.has_reference_tariffs(DEFAULT_TARIFF_KEY)

    def test_apply_tariffs_keeps_taxes(self, library):
        base = TariffsData(icms_percent=12.0, pis_cofins_percent=3.65)
        applied = library.apply_tariffs(base, "ENEL-SP")
        assert applied.energy_tariff == 370.0
        assert applied.distribution_tariff == 270.0
        assert applied.icms_percent == 12.0
        assert applied.pis_cofins_percent == 3.65
        assert base.energy_tariff == 350.0

    def test_custom_file_without_default(self, tmp_path):
        path = tmp_path / "dist.json"
        path.write_text(json.dumps({
            "distributors": [
                {"id": "X", "name": "Xingu Energia", "state": "PA"},
                {"id": "BROKEN"},
            ],
            "tariffs": {},
        }), encoding="utf-8")
        lib = DistributorLibrary(str(path))
        assert lib.get_distributor_ids() == ["X"]
        with pytest.raises(KeyError):
            lib.get_default_tariffs("X")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            DistributorLibrary(str(tmp_path / "missing.json"))


# ---- Validator Tests ----

class TestValidators:
    def test_power(self):
        assert validate_power_dc(100)[0] is True
        assert validate_power_dc(0)[0] is False
        valid, msg = validate_power_dc(6000)
        assert valid and "Warning" in msg

    def test_generation(self):
        assert validate_annual_generation(0)[0] is False
        assert validate_annual_generation(150, 100) == (True, "")
        valid, msg = validate_annual_generation(500, 100)
        assert valid and "specific yield" in msg

    def test_distributor(self, library):
        assert validate_distributor("")[0] is False
        assert validate_distributor("CEMIG", library) == (True, "")
        assert validate_distributor("ACME", library)[0] is False
        assert validate_distributor("ACME")[0] is True

    def test_capex_modes(self):
        assert validate_capex(CostsData(capex_per_wp=4.5, capex_total=None)) == (True, "")
        assert validate_capex(CostsData(capex_per_wp=None, capex_total=400000)) == (True, "")
        assert validate_capex(CostsData(capex_per_wp=4.5, capex_total=400000))[0] is False
        assert validate_capex(CostsData(capex_per_wp=None, capex_total=None))[0] is False
        assert validate_capex(CostsData(capex_per_wp=0, capex_total=None))[0] is False
        assert validate_capex(CostsData(capex_per_wp=None, capex_total=-1))[0] is False

    def test_degradation(self):
        assert validate_degradation(0.8) == (True, "")
        assert validate_degradation(-1)[0] is False
        assert validate_degradation(101)[0] is False

    def test_warnings_do_not_invalidate(self):
        assert validate_project_duration(35)[0] is True
        assert validate_project_duration(0)[0] is False
        assert validate_depreciation_years(0)[0] is True
        valid, msg = validate_inverter_year(30, 25)
        assert valid and "outside" in msg

    def test_project_default_inputs(self, library):
        project = Project(system=SystemData(distributor="CPFL"))
        valid, messages = validate_project(project, library)
        assert valid
        assert messages == []

    def test_project_collects_errors(self, library):
        project = Project(name=" ", system=SystemData(power_dc_kwp=0, distributor=""))
        valid, messages = validate_project(project, library)
        assert not valid
        assert any("DC power" in m for m in messages)
        assert any("distributor" in m for m in messages)
        assert any("name" in m for m in messages)


# ---- Model Serialization Tests ----

class TestModels:
    def test_adjustment_type_parsing(self):
        assert AdjustmentType.from_value("ipca") is AdjustmentType.IPCA
        assert AdjustmentType.from_value("Energy") is AdjustmentType.ENERGY
        with pytest.raises(ValueError):
            AdjustmentType.from_value("IGPM")

    def test_capex_mode(self):
        assert CostsData().capex_mode is CapexMode.PER_WP
        total = CostsData(capex_total=1000).for_capex_mode(CapexMode.TOTAL)
        assert total.capex_per_wp is None
        assert total.capex_mode is CapexMode.TOTAL
        with pytest.raises(ValueError):
            CapexMode.from_value("per_kw")

    def test_project_round_trip(self):
        project = Project(name="Usina Teste", system=SystemData(distributor="CEMIG"))
        assert Project.from_dict(project.to_dict()).to_dict() == project.to_dict()


# ---- Scenario Loading Tests ----

class TestScenarios:
    def test_load_full_scenario(self, tmp_path):
        path = tmp_path / "usina.json"
        path.write_text(json.dumps({
            "name": "Usina Solar Uberlândia",
            "capex_mode": "total",
            "system": {"power_dc_kwp": 250, "annual_generation_mwh": 400, "distributor": "CEMIG"},
            "costs": {"capex_total": 1000000},
            "tariffs": {"energy_tariff": 380},
            "financial": {"adjustment_type": "Energy", "project_duration": 20},
        }), encoding="utf-8")
        project = load_scenario(str(path))
        assert project.name == "Usina Solar Uberlândia"
        assert project.system.power_dc_kwp == 250
        assert project.costs.capex_per_wp is None
        assert project.costs.capex_total == 1000000
        assert project.tariffs.energy_tariff == 380
        assert project.tariffs.distribution_tariff == 250.0
        assert project.financial.adjustment_type is AdjustmentType.ENERGY
        assert project.results is None

    def test_missing_groups_use_defaults(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("{}", encoding="utf-8")
        project = load_scenario(str(path))
        assert project.to_dict() == Project().to_dict()

    def test_unknown_fields_ignored(self, tmp_path):
        path = tmp_path / "extra.json"
        path.write_text(json.dumps({"system": {"power_dc_kwp": 80, "panel_brand": "X"}}),
                        encoding="utf-8")
        assert load_scenario(str(path)).system.power_dc_kwp == 80

    def test_invalid_adjustment_type(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"financial": {"adjustment_type": "IGPM"}}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_scenario(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_scenario(str(tmp_path / "nope.json"))
