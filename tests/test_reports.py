"""Tests for chart, spreadsheet and PDF outputs and the command-line interface."""

import json
import zipfile

import pytest

import gd_cli
from gd_analyzer.models.calculations import calculate_project_economics
from gd_analyzer.models.project import CostsData, Project, SystemData
from gd_analyzer.models.sensitivity import calculate_npv_profile
from gd_analyzer.reports.charts import (
    create_all_charts,
    create_npv_profile_chart,
    generate_chart_data,
)
from gd_analyzer.reports.excel_export import (
    CASH_FLOW_COLUMNS,
    default_export_filename,
    export_to_excel,
)
from gd_analyzer.reports.executive import generate_executive_summary


@pytest.fixture
def analyzed_project():
    project = Project(name="Usina Solar Teste", system=SystemData(distributor="CEMIG"))
    calculate_project_economics(project)
    return project


# ---- Chart Tests ----

class TestCharts:
    def test_chart_data_series(self, analyzed_project):
        data = generate_chart_data(analyzed_project.results.yearly_results)
        assert len(data["cash_flow"]) == 25
        first = data["cash_flow"][0]
        year1 = analyzed_project.results.yearly_results[0]
        assert first["costs"] == year1.total_costs
        assert data["accumulated"][-1]["accumulated"] == \
            analyzed_project.results.yearly_results[-1].accumulated_cash_flow
        assert data["generation"][0]["generation"] == 150.0

    def test_all_charts_written(self, analyzed_project, tmp_path):
        paths = create_all_charts(analyzed_project.results, str(tmp_path / "charts"))
        assert len(paths) == 3
        for path in paths:
            with open(path, "rb") as f:
                assert f.read(8) == b"\x89PNG\r\n\x1a\n"

    def test_npv_profile_chart(self, analyzed_project, tmp_path):
        rates = [float(r) for r in range(0, 31, 5)]
        npvs = calculate_npv_profile(analyzed_project.results.cash_flows, rates)
        out = tmp_path / "npv.png"
        create_npv_profile_chart(rates, npvs, analyzed_project.results.irr, str(out))
        assert out.stat().st_size > 0


# ---- Excel Export Tests ----

class TestExcelExport:
    def test_default_filename(self):
        assert default_export_filename("Usina Solar") == "Usina Solar_Financial_Analysis.xlsx"
        assert default_export_filename("a/b") == "a_b_Financial_Analysis.xlsx"

    def test_workbook_sheets(self, analyzed_project, tmp_path):
        out = tmp_path / "analysis.xlsx"
        path = export_to_excel(analyzed_project, output_path=str(out))
        assert path == str(out)
        with zipfile.ZipFile(out) as zf:
            workbook_xml = zf.read("xl/workbook.xml").decode("utf-8")
        assert 'name="Cash_Flows"' in workbook_xml
        assert 'name="Summary"' in workbook_xml

    def test_one_column_per_year_field(self, analyzed_project):
        fields = set(analyzed_project.results.yearly_results[0].to_dict())
        assert {key for key, _, _ in CASH_FLOW_COLUMNS} == fields

    def test_default_location(self, analyzed_project, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = export_to_excel(analyzed_project)
        assert path == "Usina Solar Teste_Financial_Analysis.xlsx"
        assert (tmp_path / path).exists()

    def test_non_finite_values_exported(self, tmp_path):
        project = Project(costs=CostsData(capex_per_wp=None, capex_total=0),
                          system=SystemData(distributor="CPFL"))
        calculate_project_economics(project)
        out = tmp_path / "zero.xlsx"
        export_to_excel(project, output_path=str(out))
        assert zipfile.is_zipfile(out)

    def test_requires_results(self, tmp_path):
        with pytest.raises(ValueError):
            export_to_excel(Project(), output_path=str(tmp_path / "x.xlsx"))


# ---- PDF Report Tests ----

class TestExecutiveSummary:
    def test_pdf_generated(self, analyzed_project, tmp_path):
        out = tmp_path / "report.pdf"
        generate_executive_summary(analyzed_project, str(out))
        with open(out, "rb") as f:
            assert f.read(4) == b"%PDF"

    def test_requires_results(self, tmp_path):
        with pytest.raises(ValueError):
            generate_executive_summary(Project(), str(tmp_path / "x.pdf"))


# ---- CLI Tests ----

class TestCLI:
    def test_default_run(self, capsys):
        assert gd_cli.main([]) == 0
        out = capsys.readouterr().out
        assert "FINANCIAL RESULTS" in out
        assert "ANNUAL CASH FLOWS" in out
        assert "VIABILITY" in out

    def test_list_distributors(self, capsys):
        assert gd_cli.main(["--list-distributors"]) == 0
        out = capsys.readouterr().out
        assert "CEMIG" in out
        assert "ENERGISA-MT" in out

    def test_validation_failure_exit_code(self, capsys):
        assert gd_cli.main(["--power", "0", "--quiet"]) == gd_cli.EXIT_VALIDATION_ERROR
        assert "DC power" in capsys.readouterr().err

    def test_unknown_distributor(self, capsys):
        assert gd_cli.main(["--distributor", "ACME", "--quiet"]) == gd_cli.EXIT_VALIDATION_ERROR

    def test_overrides_applied(self):
        args = gd_cli.build_parser().parse_args(
            ["--distributor", "cemig", "--power", "250", "--capex-total", "900000",
             "--adjustment-type", "Energy", "--years", "20"]
        )
        library = gd_cli.DistributorLibrary()
        project = gd_cli.apply_overrides(gd_cli.create_default_project(library), args, library)
        assert project.system.distributor == "CEMIG"
        assert project.system.power_dc_kwp == 250
        assert project.tariffs.energy_tariff == 380.0
        assert project.costs.capex_per_wp is None
        assert project.costs.capex_total == 900000
        assert project.financial.adjustment_type.value == "Energy"
        assert project.financial.project_duration == 20

    def test_capex_flags_exclusive(self):
        with pytest.raises(SystemExit):
            gd_cli.build_parser().parse_args(["--capex-per-wp", "4", "--capex-total", "1"])

    def test_exports(self, tmp_path, capsys):
        xlsx = tmp_path / "out.xlsx"
        pdf = tmp_path / "out.pdf"
        charts = tmp_path / "charts"
        code = gd_cli.main(["--quiet", "--excel", str(xlsx), "--report", str(pdf),
                            "--charts", str(charts)])
        assert code == 0
        assert xlsx.exists()
        assert pdf.exists()
        assert (charts / "npv_profile.png").exists()
        assert (charts / "cash_flow.png").exists()

    def test_scenario_file(self, tmp_path, capsys):
        path = tmp_path / "scenario.json"
        path.write_text(json.dumps({
            "name": "Cenario CLI",
            "system": {"distributor": "ENEL-SP"},
        }), encoding="utf-8")
        assert gd_cli.main(["--scenario", str(path)]) == 0
        assert "Cenario CLI" in capsys.readouterr().out

    def test_missing_scenario(self, tmp_path, capsys):
        assert gd_cli.main(["--scenario", str(tmp_path / "none.json")]) == 1
        assert "Error loading scenario" in capsys.readouterr().err

    def test_sensitivity_tables(self, capsys):
        assert gd_cli.main(["--quiet", "--sensitivity"]) == 0
        out = capsys.readouterr().out
        assert "NPV (rows: CAPEX, columns: tariffs)" in out
        assert "IRR (rows: CAPEX, columns: tariffs)" in out
