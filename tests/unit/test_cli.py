"""Tests for the orrery command line interface."""

import json
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from orrery.cli.app import app, parse_overrides, parse_seed
from orrery.generation import GeneratedUniverse

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logger():
    """The CLI callback rebinds loguru to the runner's stderr; put it back."""
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestHelpers:
    """Tests for argument parsing helpers."""

    def test_parse_seed(self):
        assert parse_seed("42") == 42
        assert parse_seed("-7") == -7
        assert parse_seed("Kepler-452") == "Kepler-452"

    def test_parse_overrides(self):
        overrides = parse_overrides(["enableComets=true", "max-depth=2", "topology_preset=compact"])
        assert overrides == {"enableComets": True, "max_depth": 2, "topology_preset": "compact"}


class TestGenerate:
    """Tests for the generate command."""

    def test_writes_snapshot(self, tmp_path):
        out = tmp_path / "universe.json"
        result = runner.invoke(app, ["generate", "--seed", "Kepler-452", "--out", str(out)])
        assert result.exit_code == 0, result.output
        universe = GeneratedUniverse.model_validate_json(out.read_text())
        assert len(universe.root_ids) == 1
        assert "rootIds" in json.loads(out.read_text())

    def test_many_systems_with_style(self, tmp_path):
        out = tmp_path / "galaxy.json"
        result = runner.invoke(
            app,
            ["generate", "-s", "9", "-n", "4", "--style", "solar_like", "--set", "enableNebulae=true", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        universe = GeneratedUniverse.model_validate_json(out.read_text())
        assert universe.stats.systems == 4
        assert universe.groups

    def test_default_output_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ORRERY_DATA_DIR", str(tmp_path / "data"))
        result = runner.invoke(app, ["generate", "--seed", "5"])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "data" / "universe-5.json").exists()

    def test_config_file(self, tmp_path):
        config = tmp_path / "config.json"
        config.write_text(json.dumps({"topologyPreset": "sparse_outpost", "enableComets": True, "cometMinCount": 1}))
        out = tmp_path / "u.json"
        result = runner.invoke(app, ["generate", "--config", str(config), "--out", str(out)])
        assert result.exit_code == 0, result.output
        universe = GeneratedUniverse.model_validate_json(out.read_text())
        assert universe.stats.comets >= 1

    def test_missing_config_file(self, tmp_path):
        out = tmp_path / "x.json"
        result = runner.invoke(app, ["generate", "--config", str(tmp_path / "absent.json"), "--out", str(out)])
        assert result.exit_code == 2
        assert "Cannot read config file" in result.output
        assert not out.exists()

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_malformed_config_file(self, tmp_path, content):
        config = tmp_path / "config.json"
        config.write_text(content)
        result = runner.invoke(app, ["generate", "--config", str(config), "--out", str(tmp_path / "x.json")])
        assert result.exit_code == 2
        assert "config file" in result.output.lower()

    def test_configuration_error(self, tmp_path):
        result = runner.invoke(app, ["generate", "--set", "beltMinCount=900", "--out", str(tmp_path / "x.json")])
        assert result.exit_code == 2
        assert "belt_min_count" in result.output
        assert not (tmp_path / "x.json").exists()

    def test_unknown_style(self, tmp_path):
        result = runner.invoke(app, ["generate", "--style", "baroque", "--out", str(tmp_path / "x.json")])
        assert result.exit_code == 2

    def test_bad_override_syntax(self):
        result = runner.invoke(app, ["generate", "--set", "novalue"])
        assert result.exit_code != 0


class TestInspect:
    """Tests for validate, stats and presets."""

    @pytest.fixture
    def snapshot(self, tmp_path):
        out = tmp_path / "snap.json"
        result = runner.invoke(app, ["generate", "--seed", "3", "-n", "3", "--out", str(out)])
        assert result.exit_code == 0, result.output
        return out

    def test_validate_ok(self, snapshot):
        result = runner.invoke(app, ["validate", str(snapshot)])
        assert result.exit_code == 0
        assert "valid" in result.output

    def test_validate_reports_violations(self, snapshot):
        data = json.loads(snapshot.read_text())
        data["rootIds"].append("nowhere")
        snapshot.write_text(json.dumps(data))
        result = runner.invoke(app, ["validate", str(snapshot)])
        assert result.exit_code == 1
        assert "missing_root" in result.output

    def test_validate_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "absent.json")])
        assert result.exit_code == 1

    def test_validate_not_a_snapshot(self, tmp_path):
        path = tmp_path / "junk.json"
        path.write_text(json.dumps({"hello": "world"}))
        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1

    def test_stats(self, snapshot):
        result = runner.invoke(app, ["stats", str(snapshot)])
        assert result.exit_code == 0
        assert "systems" in result.output

    def test_presets(self):
        result = runner.invoke(app, ["presets"])
        assert result.exit_code == 0
        assert "solar_like" in result.output
        assert "deep_hierarchy" in result.output
