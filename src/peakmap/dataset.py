"""Dataset build pipeline: raw collections -> index, associations, artifacts."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence

from .assign import AssignmentResult, MountainAssigner
from .choropleth import ChoroplethClassifier
from .config import AppConfig, MatchingConfig
from .geojson_io import load_province_data
from .models import (
    AssociationManifest,
    MountainFeature,
    ProvinceFeature,
    QuarantinedFeature,
    parse_mountain_features,
    parse_province_features,
)
from .provinces import ProvinceIndex
from .util import detect_git_commit, format_name_list, sha256_file, write_json

_LOGGER = logging.getLogger("peakmap.dataset")


@dataclass(slots=True)
class MapDataset:
    """Everything derived from one data load; rebuilt wholesale on reload."""

    provinces: list[ProvinceFeature]
    mountains: list[MountainFeature]
    quarantined: list[QuarantinedFeature]
    index: ProvinceIndex
    assignment: AssignmentResult
    classifier: ChoroplethClassifier

    def annotated_provinces(self) -> dict[str, Any]:
        return self.index.annotate()

    def mountains_by_province(self) -> dict[str, list[str]]:
        """Normalized province name -> mountain ids, for the renderer."""
        return {
            name: [mountain.id for mountain in mountains]
            for name, mountains in self.index.mountains_by_name().items()
        }

    def province_buckets(self) -> dict[str, str]:
        return {
            province.id: self.classifier.classify(province.mountain_count).value
            for province in self.index
        }


def build_dataset(
    boundaries_raw: Any,
    mountains_raw: Any,
    *,
    matching: MatchingConfig | None = None,
    classifier: ChoroplethClassifier | None = None,
) -> MapDataset:
    matching_cfg = matching if matching is not None else MatchingConfig()
    provinces, quarantined_provinces = parse_province_features(
        boundaries_raw, name_fields=matching_cfg.name_fields
    )
    mountains, quarantined_mountains = parse_mountain_features(mountains_raw)
    quarantined = [*quarantined_provinces, *quarantined_mountains]
    for item in quarantined:
        _LOGGER.warning("Quarantined %s feature #%d: %s", item.kind, item.position, item.reason)

    index = ProvinceIndex.build(provinces)
    assigner = MountainAssigner(
        fuzzy=matching_cfg.fuzzy,
        geometric_fallback=matching_cfg.geometric_fallback,
    )
    assignment = assigner.assign(index, mountains)
    return MapDataset(
        provinces=provinces,
        mountains=mountains,
        quarantined=quarantined,
        index=index,
        assignment=assignment,
        classifier=classifier if classifier is not None else ChoroplethClassifier(),
    )


@dataclass(slots=True)
class AssignmentReport:
    """Outcome of the file-based association pipeline."""

    output_paths: dict[str, Path] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)
    dataset: MapDataset | None = None

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


def run_assignment(cfg: AppConfig) -> AssignmentReport:
    """Load dataset files, associate mountains and write renderer artifacts."""
    report = AssignmentReport()
    try:
        data = load_province_data(cfg.paths.boundaries_dir, cfg.paths.mountains_dir)
    except Exception as exc:
        report.add_error(f"Failed loading province data: {exc}")
        return report

    try:
        dataset = build_dataset(
            data.boundaries,
            data.mountains,
            matching=cfg.matching,
            classifier=ChoroplethClassifier(cfg.choropleth.palette),
        )
    except Exception as exc:
        report.add_error(f"Failed building province/mountain associations: {exc}")
        return report
    report.dataset = dataset

    assignment = dataset.assignment
    report.summary = {
        "provinces_total": len(dataset.index),
        "provinces_with_mountains": sum(1 for p in dataset.index if p.mountain_count > 0),
        "quarantined_features": len(dataset.quarantined),
        **assignment.summary(),
    }
    report.add_info(
        "Association summary: "
        + ", ".join(f"{key}={value}" for key, value in report.summary.items())
    )

    if dataset.quarantined:
        report.add_warning(
            f"Quarantined {len(dataset.quarantined)} malformed feature(s); see logs for reasons."
        )
    if dataset.index.collisions:
        report.add_warning(
            "Province names shared by different provinces (later one wins): "
            + format_name_list(sorted({key for key, _, _ in dataset.index.collisions}))
        )
    if assignment.unmatched:
        unmatched_names = sorted({item.declared_name for item in assignment.unmatched})
        report.add_warning(
            "Declared province names with no match: " + format_name_list(unmatched_names)
        )

    if assignment.duplicate_ids:
        report.add_warning(
            "Mountain ids shared by several features (climb status is shared too): "
            + format_name_list(sorted(set(assignment.duplicate_ids)))
        )

    annotated_path = cfg.paths.build_root / "annotated_provinces.geojson"
    lookup_path = cfg.paths.build_root / "mountains_by_province.json"
    mountains_path = cfg.paths.build_root / "mountains.geojson"
    manifest_path = cfg.paths.manifests_dir / "association_manifest.json"

    write_json(annotated_path, dataset.annotated_provinces(), sort_keys=False)
    write_json(lookup_path, dataset.mountains_by_province())
    write_json(
        mountains_path,
        {
            "type": "FeatureCollection",
            "features": [mountain.to_feature() for mountain in assignment.mountains],
        },
        sort_keys=False,
    )
    manifest = AssociationManifest.create(
        config_hash_sha256=sha256_file(cfg.source_path),
        git_commit=detect_git_commit(cfg.source_path.parent),
        summary=report.summary,
        artifacts={
            "annotated_provinces": str(annotated_path),
            "mountains_by_province": str(lookup_path),
            "mountains": str(mountains_path),
        },
    )
    write_json(manifest_path, manifest.to_dict())
    report.output_paths = {
        "annotated_provinces": annotated_path,
        "mountains_by_province": lookup_path,
        "mountains": mountains_path,
        "manifest": manifest_path,
    }
    report.add_info(f"Association artifacts written to {cfg.paths.build_root}")
    return report


def format_assignment_lines(report: AssignmentReport) -> Sequence[str]:
    lines: list[str] = []
    lines.extend(f"[INFO] {msg}" for msg in report.infos)
    lines.extend(f"[WARN] {msg}" for msg in report.warnings)
    lines.extend(f"[ERROR] {msg}" for msg in report.errors)
    if report.ok:
        lines.append("[OK] Mountain assignment completed with no errors.")
    return lines
