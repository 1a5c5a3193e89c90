"""End-to-end tests for the peakmap command line."""
import json

import pytest

from peakmap.cli import main


class TestCli:
    def test_validate(self, project_config):
        assert main(["validate", "--config", str(project_config)]) == 0
        assert main(["validate", "--config", str(project_config), "--strict"]) == 1

    def test_assign_writes_artifacts(self, project_config, tmp_path):
        assert main(["assign", "--config", str(project_config)]) == 0

        assert (tmp_path / "build" / "annotated_provinces.geojson").exists()
        assert (tmp_path / "build" / "manifests" / "association_manifest.json").exists()
        assert (tmp_path / "build" / "logs" / "peakmap.log").exists()

    def test_inspect(self, project_config, tmp_path):
        assert main(["inspect", "--config", str(project_config), "--province", "Benguet"]) == 0
        assert main(["inspect", "--config", str(project_config), "--province", "Atlantis"]) == 1
        assert (tmp_path / "build" / "reports" / "inspect.html").exists()

    def test_fetch_requires_remote_section(self, project_config):
        assert main(["fetch", "--config", str(project_config)]) == 1

    def test_climbs_actions(self, project_config, tmp_path):
        store = tmp_path / "build" / "climbs.json"

        assert main(["climbs", "--config", str(project_config), "toggle", "pulag"]) == 0
        assert json.loads(store.read_text(encoding="utf-8")) == {"pulag": True}
        assert main(["climbs", "--config", str(project_config), "unmark", "pulag"]) == 0
        assert json.loads(store.read_text(encoding="utf-8")) == {"pulag": False}
        assert main(["climbs", "--config", str(project_config), "reset"]) == 0
        assert json.loads(store.read_text(encoding="utf-8")) == {}
        assert main(["climbs", "--config", str(project_config), "mark"]) == 2

    def test_unknown_command_exits(self):
        with pytest.raises(SystemExit):
            main(["render"])
