"""Tests for the dataset build pipeline and its written artifacts."""
import json

from factories import collection, mountain
from peakmap.choropleth import Bucket
from peakmap.config import load_config
from peakmap.dataset import build_dataset, format_assignment_lines, run_assignment


class TestBuildDataset:
    def test_lookup_keyed_by_normalized_name(self, luzon_collections):
        dataset = build_dataset(*luzon_collections)

        lookup = dataset.mountains_by_province()

        assert set(lookup) == {"benguet", "ifugao"}
        assert lookup["benguet"] == [dataset.assignment.mountains[0].id]
        assert lookup["ifugao"] == [dataset.assignment.mountains[1].id]

    def test_annotated_counts_and_buckets(self, luzon_collections):
        dataset = build_dataset(*luzon_collections)

        counts = {
            f["id"]: f["properties"]["mountainCount"]
            for f in dataset.annotated_provinces()["features"]
        }

        assert counts == {"benguet": 1, "ifugao": 1}
        assert dataset.province_buckets() == {"benguet": Bucket.TIER1.value, "ifugao": Bucket.TIER1.value}

    def test_absent_collections_give_empty_dataset(self):
        dataset = build_dataset(None, None)

        assert len(dataset.index) == 0
        assert dataset.assignment.summary()["mountains_total"] == 0


class TestRunAssignment:
    def test_writes_artifacts(self, project_config):
        cfg = load_config(project_config)

        report = run_assignment(cfg)

        assert report.ok
        assert report.summary["associations"] == 2
        assert report.summary["provinces_with_mountains"] == 2
        for path in report.output_paths.values():
            assert path.exists()
        lookup = json.loads(report.output_paths["mountains_by_province"].read_text(encoding="utf-8"))
        assert sorted(lookup) == ["benguet", "ifugao"]
        manifest = json.loads(report.output_paths["manifest"].read_text(encoding="utf-8"))
        assert manifest["summary"]["associations"] == 2
        assert len(manifest["config_hash_sha256"]) == 64

    def test_unmatched_names_are_warnings(self, project_config):
        report = run_assignment(load_config(project_config))

        assert any("Nowhere" in warning for warning in report.warnings)
        lines = format_assignment_lines(report)
        assert lines[-1].startswith("[OK]")

    def test_missing_data_directory_is_an_error(self, project_config, tmp_path):
        cfg = load_config(project_config)
        for item in (tmp_path / "data" / "mountains").iterdir():
            item.unlink()
        (tmp_path / "data" / "mountains").rmdir()

        report = run_assignment(cfg)

        assert not report.ok
        assert report.output_paths == {}

    def test_shared_mountain_ids_are_warnings(self, project_config, tmp_path):
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

        report = run_assignment(load_config(project_config))

        assert report.ok
        assert any("Mountain ids shared by several features" in warning for warning in report.warnings)
