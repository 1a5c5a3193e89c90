"""CLI entrypoint for the province mountain map toolkit."""

from __future__ import annotations

import argparse
import logging
from typing import Sequence

from .climbs import JsonFileClimbStore
from .config import AppConfig, load_config
from .dataset import build_dataset, format_assignment_lines, run_assignment
from .inspect_report import generate_inspection_report
from .remote import ProvinceDataClient
from .util import ensure_directories, setup_logging, write_json
from .validate import Validator, format_report_lines

LOGGER = logging.getLogger("peakmap.cli")

_CLIMB_ACTIONS = ("list", "get", "toggle", "mark", "unmark", "reset")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="peakmap",
        description="Province mountain map data tools.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("--config", default="config.yaml", help="Path to YAML config.")
        p.add_argument("--verbose", action="store_true", help="Enable debug logs.")

    validate_p = subparsers.add_parser("validate", help="Validate config and input datasets.")
    add_common(validate_p)
    validate_p.add_argument(
        "--strict",
        action="store_true",
        help="Treat data-quality issues (unmatched names, collisions) as errors.",
    )

    assign_p = subparsers.add_parser(
        "assign",
        help="Associate mountains with provinces and write renderer artifacts.",
    )
    add_common(assign_p)

    inspect_p = subparsers.add_parser(
        "inspect",
        help="Generate HTML + JSON report of province counts and match tiers.",
    )
    add_common(inspect_p)
    inspect_p.add_argument(
        "--province",
        action="append",
        default=[],
        help="Province name or id filter. Can be repeated.",
    )
    inspect_p.add_argument(
        "--limit",
        type=int,
        default=40,
        help="Max provinces in report when --province is not provided.",
    )

    fetch_p = subparsers.add_parser(
        "fetch",
        help="Fetch province data from the configured provinces endpoint.",
    )
    add_common(fetch_p)

    climbs_p = subparsers.add_parser("climbs", help="Read or change climbed-mountain status.")
    add_common(climbs_p)
    climbs_p.add_argument("action", choices=_CLIMB_ACTIONS)
    climbs_p.add_argument("mountain_id", nargs="?", default=None)

    return parser


def _load_and_setup(args: argparse.Namespace) -> AppConfig:
    cfg = load_config(args.config)
    log_path = cfg.paths.logs_dir / "peakmap.log"
    setup_logging(log_path, verbose=args.verbose)
    ensure_directories(cfg.paths.build_directories)
    return cfg


def _run_validate(cfg: AppConfig, *, strict: bool) -> int:
    report = Validator(cfg).run(strict=strict)
    for line in format_report_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_assign(cfg: AppConfig) -> int:
    report = run_assignment(cfg)
    for line in format_assignment_lines(report):
        LOGGER.info(line)
    return 0 if report.ok else 1


def _run_inspect(cfg: AppConfig, *, provinces: Sequence[str], limit: int) -> int:
    try:
        html_path, json_path = generate_inspection_report(
            cfg,
            province_filters=provinces,
            limit=limit,
        )
    except Exception as exc:
        LOGGER.error("Inspection report failed: %s", exc)
        return 1
    LOGGER.info("Inspection HTML report written to %s", html_path)
    LOGGER.info("Inspection JSON report written to %s", json_path)
    return 0


def _run_fetch(cfg: AppConfig) -> int:
    if cfg.remote is None:
        LOGGER.error("No 'remote' section in %s; cannot fetch province data.", cfg.source_path)
        return 1
    try:
        data = ProvinceDataClient(cfg.remote).fetch()
    except Exception as exc:
        LOGGER.error("Fetching province data failed: %s", exc)
        return 1

    output_path = cfg.paths.build_root / "province_data.json"
    write_json(output_path, data.to_dict(), sort_keys=False)
    LOGGER.info("Province payload written to %s", output_path)

    dataset = build_dataset(data.boundaries, data.mountains, matching=cfg.matching)
    summary = dataset.assignment.summary()
    LOGGER.info(
        "Fetched dataset: provinces=%d, mountains=%d, associations=%d",
        len(dataset.index),
        summary["mountains_total"],
        summary["associations"],
    )
    return 0


def _run_climbs(cfg: AppConfig, *, action: str, mountain_id: str | None) -> int:
    try:
        store = JsonFileClimbStore(cfg.paths.climbs_store)
    except ValueError as exc:
        LOGGER.error("%s", exc)
        return 1

    if action == "list":
        climbed = sorted(key for key, value in store.as_dict().items() if value)
        for key in climbed:
            LOGGER.info("[CLIMBED] %s", key)
        LOGGER.info("%d climbed mountain(s) in %s", len(climbed), store.path)
        return 0
    if action == "reset":
        store.reset()
        LOGGER.info("Climb store %s reset", store.path)
        return 0

    if not mountain_id:
        LOGGER.error("climbs %s requires a mountain id", action)
        return 2
    if action == "get":
        LOGGER.info("%s climbed=%s", mountain_id, store.get(mountain_id))
    elif action == "toggle":
        LOGGER.info("%s climbed=%s", mountain_id, store.toggle(mountain_id))
    elif action == "mark":
        store.mark_climbed(mountain_id)
        LOGGER.info("%s climbed=True", mountain_id)
    elif action == "unmark":
        store.mark_not_climbed(mountain_id)
        LOGGER.info("%s climbed=False", mountain_id)
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    cfg = _load_and_setup(args)
    command = str(args.command)
    if command == "validate":
        return _run_validate(cfg, strict=bool(args.strict))
    if command == "assign":
        return _run_assign(cfg)
    if command == "inspect":
        provinces = [str(item) for item in args.province]
        return _run_inspect(cfg, provinces=provinces, limit=int(args.limit))
    if command == "fetch":
        return _run_fetch(cfg)
    if command == "climbs":
        return _run_climbs(cfg, action=str(args.action), mountain_id=args.mountain_id)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    return _dispatch(args)


if __name__ == "__main__":
    raise SystemExit(main())
