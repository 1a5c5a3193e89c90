"""Validation layer for config and input datasets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .climbs import JsonFileClimbStore
from .config import AppConfig
from .dataset import MapDataset, build_dataset
from .geojson_io import load_municipality_boundaries, load_province_data
from .util import format_name_list


@dataclass(slots=True)
class ValidationReport:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    infos: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(self, msg: str) -> None:
        self.errors.append(msg)

    def add_warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def add_info(self, msg: str) -> None:
        self.infos.append(msg)


class Validator:
    """Top-level input and data-quality validator."""

    def __init__(self, cfg: AppConfig) -> None:
        self.cfg = cfg

    def run(self, *, strict: bool = False) -> ValidationReport:
        report = ValidationReport()
        hard_fail = strict or self.cfg.matching.strict
        if not self._validate_input_dirs(report):
            return report
        dataset = self._validate_dataset(report, hard_fail=hard_fail)
        if dataset is not None:
            self._validate_associations(report, dataset, hard_fail=hard_fail)
        self._validate_municipalities(report)
        self._validate_climb_store(report)
        return report

    def _validate_input_dirs(self, report: ValidationReport) -> bool:
        ok = True
        for path in self.cfg.paths.required_input_dirs:
            if not path.is_dir():
                report.add_error(f"Missing required data directory: {path}")
                ok = False
        return ok

    def _validate_dataset(self, report: ValidationReport, *, hard_fail: bool) -> MapDataset | None:
        try:
            data = load_province_data(self.cfg.paths.boundaries_dir, self.cfg.paths.mountains_dir)
        except Exception as exc:
            report.add_error(f"Failed loading province data: {exc}")
            return None

        try:
            dataset = build_dataset(data.boundaries, data.mountains, matching=self.cfg.matching)
        except Exception as exc:
            report.add_error(f"Failed parsing province/mountain collections: {exc}")
            return None

        report.add_info(
            f"Loaded {len(dataset.provinces)} province features and "
            f"{len(dataset.mountains)} mountain features"
        )
        if not dataset.provinces:
            report.add_warning("Province collection is empty; the map will have nothing to select.")
        if not dataset.mountains:
            report.add_warning("Mountain collection is empty; every province count will be 0.")

        if dataset.quarantined:
            reasons = [f"{item.kind}#{item.position}({item.reason})" for item in dataset.quarantined]
            self._add_quality_issue(
                report,
                "Malformed features quarantined: " + format_name_list(reasons),
                hard_fail=hard_fail,
            )

        unnamed = [str(feature.position) for feature in dataset.provinces if not feature.names]
        if unnamed:
            report.add_warning(
                "Province features without a usable name (rendered, never counted): #"
                + format_name_list(unnamed)
            )

        if dataset.index.collisions:
            collided = sorted({f"{key}({old}->{new})" for key, old, new in dataset.index.collisions})
            self._add_quality_issue(
                report,
                "Different provinces share a normalized name; later one wins: "
                + format_name_list(collided),
                hard_fail=hard_fail,
            )
        return dataset

    def _validate_associations(
        self,
        report: ValidationReport,
        dataset: MapDataset,
        *,
        hard_fail: bool,
    ) -> None:
        assignment = dataset.assignment
        without_list = [
            mountain.name for mountain in assignment.mountains if mountain.declared_provinces is None
        ]
        if without_list:
            report.add_warning(
                "Mountains without a province list: " + format_name_list(sorted(without_list))
            )

        if assignment.unmatched:
            unmatched = sorted({item.declared_name for item in assignment.unmatched})
            self._add_quality_issue(
                report,
                "Declared province names that match no province: " + format_name_list(unmatched),
                hard_fail=hard_fail,
            )

        if assignment.duplicate_ids:
            self._add_quality_issue(
                report,
                "Mountain ids used by more than one feature: "
                + format_name_list(sorted(set(assignment.duplicate_ids))),
                hard_fail=hard_fail,
            )

        tiers = assignment.tier_counts()
        if tiers["fuzzy"]:
            report.add_warning(
                f"{tiers['fuzzy']} association(s) relied on substring matching; "
                "review them with the inspect report."
            )
        report.add_info(
            "Association check summary: "
            f"associations={len(assignment.associations)}, "
            f"exact={tiers['exact']}, normalized={tiers['normalized']}, "
            f"fuzzy={tiers['fuzzy']}, geometry={tiers['geometry']}, "
            f"unassociated_mountains={len(assignment.unassociated_mountain_ids)}"
        )

    def _validate_municipalities(self, report: ValidationReport) -> None:
        directory = self.cfg.paths.municipalities_dir
        if directory is None:
            return
        if not directory.is_dir():
            report.add_warning(f"Municipality directory not found: {directory}")
            return
        try:
            municipalities = load_municipality_boundaries(directory)
        except Exception as exc:
            report.add_error(f"Failed loading municipality boundaries: {exc}")
            return
        report.add_info(f"Loaded municipality boundaries for {len(municipalities)} province codes")

    def _validate_climb_store(self, report: ValidationReport) -> None:
        path = self.cfg.paths.climbs_store
        if not path.exists():
            report.add_info(f"Climb store not created yet: {path}")
            return
        try:
            store = JsonFileClimbStore(path)
        except ValueError as exc:
            report.add_error(str(exc))
            return
        climbed = sum(1 for value in store.as_dict().values() if value)
        report.add_info(f"Climb store {path} records {climbed} climbed mountain(s)")

    @staticmethod
    def _add_quality_issue(report: ValidationReport, msg: str, *, hard_fail: bool) -> None:
        if hard_fail:
            report.add_error(msg)
        else:
            report.add_warning(msg)


def format_report_lines(report: ValidationReport) -> Iterable[str]:
    if report.infos:
        for info in report.infos:
            yield f"[INFO] {info}"
    if report.warnings:
        for warning in report.warnings:
            yield f"[WARN] {warning}"
    if report.errors:
        for error in report.errors:
            yield f"[ERROR] {error}"
    if report.ok:
        yield "[OK] Validation completed with no errors."
