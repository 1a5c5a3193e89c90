"""Tests for the typed config loader."""
import pytest
import yaml

from peakmap.choropleth import DEFAULT_PALETTE
from peakmap.config import load_config

BASE_PATHS = {
    "boundaries_dir": "data/regions",
    "mountains_dir": "data/mountains",
    "climbs_store": "build/climbs.json",
    "build_root": "build",
    "manifests_dir": "build/manifests",
    "reports_dir": "build/reports",
    "logs_dir": "build/logs",
}


def write_config(tmp_path, **sections):
    raw = {"project": {"name": "peaks"}, "paths": dict(BASE_PATHS), **sections}
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        cfg = load_config(write_config(tmp_path))

        assert cfg.project.name == "peaks"
        assert cfg.paths.boundaries_dir == tmp_path.resolve() / "data" / "regions"
        assert cfg.paths.municipalities_dir is None
        assert cfg.matching.name_fields == ("name", "adm2_en")
        assert cfg.matching.fuzzy is True
        assert cfg.matching.geometric_fallback is False
        assert cfg.map.initial_center == (20.0, 132.0)
        assert cfg.map.label_min_zoom == 5.0
        assert cfg.choropleth.palette == DEFAULT_PALETTE
        assert cfg.remote is None

    def test_sections_override_defaults(self, tmp_path):
        cfg = load_config(
            write_config(
                tmp_path,
                matching={"name_fields": ["adm2_en"], "fuzzy": False, "strict": True},
                map={"initial_center": [12.8, 121.7], "initial_zoom": 7, "label_min_zoom": 8},
                remote={"provinces_url": "http://localhost:3000/api/provinces", "max_retries": 1},
            )
        )

        assert cfg.matching.name_fields == ("adm2_en",)
        assert cfg.matching.fuzzy is False
        assert cfg.matching.strict is True
        assert cfg.map.initial_zoom == 7.0
        assert cfg.map.label_min_zoom == 8.0
        assert cfg.remote.provinces_url == "http://localhost:3000/api/provinces"
        assert cfg.remote.max_retries == 1
        assert cfg.remote.request_timeout_s == 30

    def test_build_directories(self, tmp_path):
        cfg = load_config(write_config(tmp_path))

        assert cfg.paths.build_root in cfg.paths.build_directories
        assert cfg.paths.required_input_dirs == (cfg.paths.boundaries_dir, cfg.paths.mountains_dir)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    @pytest.mark.parametrize(
        ("sections", "message"),
        [
            ({"matching": {"fuzzy": "yes"}}, "matching.fuzzy"),
            ({"matching": {"name_fields": []}}, "at least one"),
            ({"map": {"initial_center": [95, 120]}}, "latitude"),
            ({"map": {"initial_zoom": 1, "min_zoom": 3}}, "initial_zoom"),
            ({"choropleth": {"palette": ["#000000"]}}, "exactly 8"),
            ({"remote": {"max_retries": 2}}, "remote.provinces_url"),
        ],
    )
    def test_invalid_values(self, tmp_path, sections, message):
        with pytest.raises(ValueError, match=message):
            load_config(write_config(tmp_path, **sections))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ValueError, match="mapping"):
            load_config(path)
