"""Association inspection report (HTML + JSON) for debugging name matching."""

from __future__ import annotations

import json
from html import escape
from pathlib import Path
from typing import Any, Sequence

from .assign import Association, MatchTier
from .choropleth import ChoroplethClassifier
from .config import AppConfig
from .dataset import MapDataset, build_dataset
from .geojson_io import load_province_data
from .models import Province
from .names import normalize_name
from .util import write_json


def generate_inspection_report(
    cfg: AppConfig,
    *,
    province_filters: Sequence[str],
    limit: int,
) -> tuple[Path, Path]:
    """Generate a visual + JSON report of province counts and match tiers."""
    data = load_province_data(cfg.paths.boundaries_dir, cfg.paths.mountains_dir)
    dataset = build_dataset(
        data.boundaries,
        data.mountains,
        matching=cfg.matching,
        classifier=ChoroplethClassifier(cfg.choropleth.palette),
    )
    payload = build_inspection_payload(dataset, province_filters=province_filters, limit=limit)

    json_path = cfg.paths.manifests_dir / "inspect_report.json"
    html_path = cfg.paths.reports_dir / "inspect.html"
    write_json(json_path, payload)
    _write_html_report(payload=payload, output_html=html_path)
    return (html_path, json_path)


def build_inspection_payload(
    dataset: MapDataset,
    *,
    province_filters: Sequence[str] = (),
    limit: int = 40,
) -> dict[str, Any]:
    selected = _filter_provinces(list(dataset.index), province_filters=province_filters, limit=limit)
    by_province: dict[str, list[Association]] = {}
    for association in dataset.assignment.associations:
        by_province.setdefault(association.province_id, []).append(association)

    rows = [
        _analyze_province(province, by_province.get(province.id, []), dataset.classifier)
        for province in selected
    ]
    assignment = dataset.assignment
    names_by_id = {mountain.id: mountain.name for mountain in assignment.mountains}
    return {
        "meta": {
            "provinces_total": len(dataset.index),
            "provinces_in_report": len(rows),
            "filters": sorted(province_filters),
            "mountains_total": len(assignment.mountains),
            "quarantined": [item.to_dict() for item in dataset.quarantined],
        },
        "summary": {
            **assignment.summary(),
            "name_collisions": len(dataset.index.collisions),
        },
        "unmatched": [item.to_dict() for item in assignment.unmatched],
        "unassociated_mountains": [
            {"id": mountain_id, "name": names_by_id.get(mountain_id, "")}
            for mountain_id in assignment.unassociated_mountain_ids
        ],
        "legend": [
            {"bucket": bucket.value, "color": color} for bucket, color in dataset.classifier.legend()
        ],
        "provinces": rows,
    }


def _filter_provinces(
    provinces: list[Province],
    *,
    province_filters: Sequence[str],
    limit: int,
) -> list[Province]:
    if limit < 1:
        raise ValueError("--limit must be >= 1")
    if province_filters:
        wanted = {normalize_name(item) for item in province_filters if item.strip()}
        selected = [
            province
            for province in provinces
            if province.id in province_filters
            or any(normalize_name(name) in wanted for name in province.names)
        ]
        if not selected:
            raise ValueError("No province matches --province filter: " + ", ".join(province_filters))
        return selected
    ranked = sorted(provinces, key=lambda p: (-p.mountain_count, p.display_name.casefold()))
    return ranked[:limit]


def _analyze_province(
    province: Province,
    associations: list[Association],
    classifier: ChoroplethClassifier,
) -> dict[str, Any]:
    bucket = classifier.classify(province.mountain_count)
    tiers = {tier.value: 0 for tier in MatchTier}
    for association in associations:
        tiers[association.tier.value] += 1
    mountains_by_id = {mountain.id: mountain for mountain in province.mountains}
    return {
        "id": province.id,
        "name": province.display_name,
        "names": list(province.names),
        "mountain_count": province.mountain_count,
        "bucket": bucket.value,
        "color": classifier.color(bucket),
        "tiers": tiers,
        "mountains": [
            {
                "id": association.mountain_id,
                "name": mountains_by_id[association.mountain_id].name
                if association.mountain_id in mountains_by_id
                else "",
                "declared_name": association.declared_name,
                "tier": association.tier.value,
            }
            for association in associations
        ],
    }


_STYLE = """
body { font-family: Helvetica, Arial, sans-serif; margin: 24px; color: #1b1b1b; }
section { margin-bottom: 20px; padding: 12px 16px; border: 1px solid #d9d9d9; border-radius: 6px; }
section h2 { margin: 0 0 10px 0; font-size: 1.1em; }
.kpis { display: flex; flex-wrap: wrap; gap: 8px; }
.kpis span { background: #f3f6f3; border-radius: 4px; padding: 6px 10px; }
.legend span { display: inline-block; margin-right: 14px; }
.swatch { display: inline-block; width: 12px; height: 12px; margin-right: 5px; border: 1px solid #888; vertical-align: middle; }
table.provinces { border-collapse: collapse; width: 100%; }
table.provinces th, table.provinces td { border: 1px solid #d9d9d9; padding: 6px 8px; text-align: left; vertical-align: top; }
table.provinces th { background: #eef2ee; }
td.fuzzy { color: #a35c00; font-weight: bold; }
pre { white-space: pre-wrap; margin: 6px 0 0 0; background: #fafafa; padding: 6px; }
"""

_KPIS = (
    ("Associations", "associations"),
    ("Exact", "tier_exact"),
    ("Normalized", "tier_normalized"),
    ("Substring", "tier_fuzzy"),
    ("Geometry", "tier_geometry"),
    ("Unmatched names", "unmatched_names"),
    ("Unassociated mountains", "unassociated_mountains"),
    ("Name collisions", "name_collisions"),
)


def _swatch(color: str) -> str:
    return f"<span class='swatch' style='background:{escape(color)}'></span>"


def _province_row(row: dict[str, Any]) -> str:
    fuzzy_count = row["tiers"]["fuzzy"]
    mountains_json = json.dumps(row["mountains"], ensure_ascii=False, indent=2)
    cells = (
        escape(row["id"]),
        escape(row["name"]),
        escape(", ".join(row["names"])),
        str(row["mountain_count"]),
        _swatch(row["color"]) + escape(row["bucket"]),
        f"<details><summary>{len(row['mountains'])}</summary><pre>{escape(mountains_json)}</pre></details>",
    )
    fuzzy_cell = f"<td class='fuzzy'>{fuzzy_count}</td>" if fuzzy_count else "<td>0</td>"
    tds = "".join(f"<td>{cell}</td>" for cell in cells[:5]) + fuzzy_cell + f"<td>{cells[5]}</td>"
    return f"<tr>{tds}</tr>"


def _write_html_report(*, payload: dict[str, Any], output_html: Path) -> None:
    meta = payload["meta"]
    summary = payload["summary"]

    kpis = "".join(f"<span>{label}: {summary[key]}</span>" for label, key in _KPIS)
    legend = "".join(
        f"<span>{_swatch(item['color'])}{escape(item['bucket'])}</span>"
        for item in payload["legend"]
    )
    unmatched = "".join(
        f"<li>{escape(item['mountain_name'])}: {escape(item['declared_name'])}</li>"
        for item in payload["unmatched"]
    ) or "<li>none</li>"
    rows = "\n".join(_province_row(row) for row in payload["provinces"])

    body = f"""<h1>Province mountain associations</h1>
<section>
<h2>Dataset</h2>
<p>{meta['provinces_in_report']} of {meta['provinces_total']} provinces shown;
{meta['mountains_total']} mountains; {len(meta['quarantined'])} quarantined features.</p>
<div class='kpis'>{kpis}</div>
</section>
<section class='legend'><h2>Choropleth buckets</h2>{legend}</section>
<section><h2>Unmatched declared names</h2><ul>{unmatched}</ul></section>
<table class='provinces'>
<thead><tr><th>ID</th><th>Province</th><th>Names</th><th>Mountains</th><th>Bucket</th><th>Substring matches</th><th>Associations</th></tr></thead>
<tbody>
{rows}
</tbody>
</table>"""

    document = (
        "<!doctype html>\n<html lang='en'>\n<head>\n<meta charset='utf-8'>\n"
        "<title>peakmap inspect report</title>\n"
        f"<style>{_STYLE}</style>\n</head>\n<body>\n{body}\n</body>\n</html>\n"
    )
    output_html.parent.mkdir(parents=True, exist_ok=True)
    output_html.write_text(document, encoding="utf-8")
