"""Tests for the validation layer."""
import json

from factories import collection, mountain, province
from peakmap.config import load_config
from peakmap.validate import Validator, format_report_lines


class TestValidator:
    def test_data_quality_issues_warn_by_default(self, project_config):
        report = Validator(load_config(project_config)).run()

        assert report.ok
        assert any("Nowhere" in warning for warning in report.warnings)
        assert any("municipality boundaries for 1" in info for info in report.infos)
        assert list(format_report_lines(report))[-1].startswith("[OK]")

    def test_strict_turns_quality_issues_into_errors(self, project_config):
        report = Validator(load_config(project_config)).run(strict=True)

        assert not report.ok
        assert any("Nowhere" in error for error in report.errors)

    def test_missing_input_directory(self, project_config, tmp_path):
        (tmp_path / "data" / "regions" / "car.json").unlink()
        (tmp_path / "data" / "regions").rmdir()

        report = Validator(load_config(project_config)).run()

        assert not report.ok
        assert "Missing required data directory" in report.errors[0]

    def test_name_collisions_reported(self, project_config, tmp_path):
        (tmp_path / "data" / "regions" / "z-dup.json").write_text(
            json.dumps(collection([province("benguet ", feature_id="benguet-2")])),
            encoding="utf-8",
        )

        report = Validator(load_config(project_config)).run()

        assert any("share a normalized name" in warning for warning in report.warnings)

    def test_broken_climb_store_is_an_error(self, project_config, tmp_path):
        store = tmp_path / "build" / "climbs.json"
        store.parent.mkdir(parents=True, exist_ok=True)
        store.write_text("{broken", encoding="utf-8")

        report = Validator(load_config(project_config)).run()

        assert any("climb store" in error for error in report.errors)

    def test_duplicate_mountain_ids_reported(self, project_config, tmp_path):
        (tmp_path / "data" / "mountains" / "z-dup.geojson").write_text(
            json.dumps(
                collection(
                    [
                        mountain("Ugo", 120.8, 16.3, mountain_id="ugo"),
                        mountain("Ugo East", 120.85, 16.3, mountain_id="ugo"),
                    ]
                )
            ),
            encoding="utf-8",
        )

        lenient = Validator(load_config(project_config)).run()
        strict = Validator(load_config(project_config)).run(strict=True)

        assert any("used by more than one feature: ugo" in warning for warning in lenient.warnings)
        assert any("used by more than one feature: ugo" in error for error in strict.errors)
