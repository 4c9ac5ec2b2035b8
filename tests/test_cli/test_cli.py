"""
Tests for fly_advisor/cli.py via typer's CliRunner.

Logging setup is patched out so the root logger never holds handlers bound
to the runner's temporary streams.  ``recommend`` runs against a temporary
catalog, with live providers disabled in the temporary config.

What we test
------------
validate-config:
  - Valid file → exit 0, values echoed, "[OK] Config valid.".
  - Missing or invalid file → exit 1 with an [ERROR] line.
moon:
  - JSON output carries the date and moon phase fields.
  - Invalid date → exit 1.
solunar:
  - Text output reports an active major period.
  - JSON output has periods / current / insights.
recommend:
  - JSON output lists suggestions from the given catalog.
  - Text output ends with the suggestion count.
  - Explicit conditions and --limit are honored.
  - Out-of-range coordinates and an empty catalog → exit 1.
  - --site pins the water reading to one USGS gauge; a site with no
    readings, or --site with --offline, exits 1.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from fly_advisor import cli
from fly_advisor.cli import app
from fly_advisor.models.conditions import WaterSnapshot
from fly_advisor.providers.water import UsgsWaterClient
from fly_advisor.taxonomy.condition_taxonomy import DataQuality

runner = CliRunner()


@pytest.fixture(autouse=True)
def _no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "_configure_logging", lambda config: None)
    for var in ("FLY_ADVISOR_CATALOG_PATH", "FLY_ADVISOR_LOG_LEVEL", "FLY_ADVISOR_ENABLE_USAGE_LIMITS"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(
        "[selection]\nmax_suggestions = 6\nfree_suggestions = 3\n\n"
        "[providers]\nweather_enabled = false\nwater_enabled = false\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def catalog_file(tmp_path, sample_records):
    path = tmp_path / "flies.json"
    path.write_text(json.dumps({"flies": sample_records}), encoding="utf-8")
    return path


def _recommend_args(config_file, catalog_file, *extra: str) -> list[str]:
    return [
        "recommend",
        "--location", "Madison River",
        "--lat", "44.65",
        "--lon", "-111.07",
        "--offline",
        "--config", str(config_file),
        "--catalog", str(catalog_file),
        *extra,
    ]


def _online(args: list[str]) -> list[str]:
    return [a for a in args if a != "--offline"]


class TestValidateConfig:
    def test_valid(self, config_file):
        result = runner.invoke(app, ["validate-config", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Max suggestions:  6" in result.output
        assert "[OK] Config valid." in result.output

    def test_full(self, config_file):
        result = runner.invoke(app, ["validate-config", "--config", str(config_file), "--full"])
        assert result.exit_code == 0
        assert "Full config (JSON):" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "missing.toml")])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[scoring]\nconfidence_floor = 99\n", encoding="utf-8")
        result = runner.invoke(app, ["validate-config", "--config", str(path)])
        assert result.exit_code == 1
        assert "Config validation failed" in result.output


class TestMoon:
    def test_json(self):
        result = runner.invoke(app, ["moon", "--date", "2024-06-22", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["date"] == "2024-06-22"
        assert set(payload) >= {"phase", "illumination", "age", "fishing_quality", "feeding_activity"}
        assert 0.0 <= payload["illumination"] <= 100.0

    def test_text(self):
        result = runner.invoke(app, ["moon", "--date", "2024-06-22"])
        assert result.exit_code == 0
        assert "Phase:" in result.output

    def test_bad_date(self):
        result = runner.invoke(app, ["moon", "--date", "22/06/2024"])
        assert result.exit_code == 1
        assert "Invalid date" in result.output


class TestSolunar:
    def test_in_major_period(self):
        result = runner.invoke(app, ["solunar", "--lat", "40", "--lon", "0", "--at", "2023-03-21T06:30:00"])
        assert result.exit_code == 0
        assert "Sunrise: 2023-03-21 06:00 UTC" in result.output
        assert "major period, 30 min remaining" in result.output

    def test_json(self):
        result = runner.invoke(
            app, ["solunar", "--lat", "40", "--lon", "0", "--at", "2023-03-21T09:00:00", "--json"]
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert set(payload) == {"periods", "current", "insights"}
        assert payload["current"]["in_period"] is False
        assert len(payload["periods"]["major"]) == 2

    def test_bad_instant(self):
        result = runner.invoke(app, ["solunar", "--lat", "40", "--lon", "0", "--at", "dawn"])
        assert result.exit_code == 1


class TestRecommend:
    def test_json(self, config_file, catalog_file, sample_records):
        result = runner.invoke(app, _recommend_args(config_file, catalog_file, "--json"))
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["can_perform"] is True
        assert payload["error"] is None
        assert len(payload["suggestions"]) == 6
        known = {r["id"] for r in sample_records}
        assert {s["fly"]["id"] for s in payload["suggestions"]} <= known

    def test_text(self, config_file, catalog_file):
        result = runner.invoke(app, _recommend_args(config_file, catalog_file))
        assert result.exit_code == 0, result.output
        assert "Fly recommendations for Madison River" in result.output
        assert "[OK] 6 fly suggestion(s)." in result.output

    def test_conditions_and_limit(self, config_file, catalog_file):
        result = runner.invoke(
            app,
            _recommend_args(
                config_file,
                catalog_file,
                "--weather", "cloudy",
                "--time-of-year", "winter",
                "--water-temp", "38",
                "--limit", "2",
                "--json",
            ),
        )
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.stdout)["suggestions"]) == 2

    def test_bad_coordinates(self, config_file, catalog_file):
        result = runner.invoke(
            app,
            [
                "recommend", "--location", "Nowhere", "--lat", "123", "--lon", "0",
                "--offline", "--config", str(config_file), "--catalog", str(catalog_file),
            ],
        )
        assert result.exit_code == 1
        assert "Invalid conditions" in result.output

    def test_empty_catalog(self, config_file, tmp_path):
        empty = tmp_path / "empty.json"
        empty.write_text("[]", encoding="utf-8")
        result = runner.invoke(app, _recommend_args(config_file, empty))
        assert result.exit_code == 1
        assert "No flies available in the catalog." in result.output

    def test_site_reading_used(self, config_file, catalog_file, monkeypatch):
        requested: list[str] = []

        async def fake_fetch_site(self, site_code):
            requested.append(site_code)
            return WaterSnapshot(
                station_name="Madison River near West Yellowstone",
                flow_cfs=600.0,
                data_quality=DataQuality.GOOD,
            )

        monkeypatch.setattr(UsgsWaterClient, "fetch_site", fake_fetch_site)
        result = runner.invoke(app, _online(_recommend_args(config_file, catalog_file, "--site", "06037500", "--json")))
        assert result.exit_code == 0, result.output
        assert requested == ["06037500"]
        reasons = [s["reason"] for s in json.loads(result.stdout)["suggestions"]]
        assert all("Real-time gauge data from Madison River near West Yellowstone" in r for r in reasons)

    def test_site_without_readings(self, config_file, catalog_file, monkeypatch):
        async def empty_site(self, site_code):
            return None

        monkeypatch.setattr(UsgsWaterClient, "fetch_site", empty_site)
        result = runner.invoke(app, _online(_recommend_args(config_file, catalog_file, "--site", "00000000")))
        assert result.exit_code == 1
        assert "returned no readings" in result.output

    def test_site_conflicts_with_offline(self, config_file, catalog_file):
        result = runner.invoke(app, _recommend_args(config_file, catalog_file, "--site", "06037500"))
        assert result.exit_code == 1
        assert "drop --offline" in result.output
