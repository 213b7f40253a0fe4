from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Tuple

from openpyxl import Workbook

from .models import PropertyResult

COLUMN_WIDTH_RANGE = (12, 80)


def _plain(v: Any) -> bool:
    return v is None or isinstance(v, (str, int, float, bool))


def flatten(obj: Any, prefix: str = "") -> List[Tuple[str, Any]]:
    """(path, value) leaves of a stored record: `properties.I`, `a.c[0]`, ..."""
    if isinstance(obj, Mapping):
        children = [(f"{prefix}.{k}" if prefix else str(k), v) for k, v in obj.items()]
    elif isinstance(obj, (list, tuple)):
        children = [(f"{prefix}[{i}]", v) for i, v in enumerate(obj)]
    else:
        return [(prefix or "value", obj if _plain(obj) else str(obj))]

    leaves: List[Tuple[str, Any]] = []
    for path, child in children:
        leaves.extend(flatten(child, path))
    return leaves


def _cell(v: Any) -> Any:
    return v if _plain(v) else json.dumps(v, ensure_ascii=False)


def _property_columns(results: Sequence[PropertyResult]) -> List[str]:
    cols: List[str] = []
    for r in results:
        for k in r.properties:
            if k not in cols:
                cols.append(k)
    return cols


def _fit_columns(ws) -> None:
    lo, hi = COLUMN_WIDTH_RANGE
    for column in ws.iter_cols():
        longest = max((len(str(c.value)) for c in column if c.value is not None), default=0)
        if longest:
            ws.column_dimensions[column[0].column_letter].width = min(max(longest + 2, lo), hi)


def export_excel(results: Sequence[PropertyResult], out_path: Path) -> Path:
    wb = Workbook()

    ws = wb.active
    ws.title = "Results"
    cols = _property_columns(results)
    ws.append(["targetMemberIndex", "timestamp", "version", *cols])
    for r in results:
        ws.append([r.target_member_index, r.timestamp, r.version, *(_cell(r.properties.get(c)) for c in cols)])
    _fit_columns(ws)

    ws2 = wb.create_sheet("JSON")
    ws2.append(["JSON"])
    for r in results:
        ws2.append([r.to_json()])
    ws2.column_dimensions["A"].width = 120

    out_path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(out_path)
    return out_path


def export_handoff(results: Sequence[PropertyResult], out_dir: Path) -> Tuple[Path, Path]:
    """handoff.json (records as written to storage) + handoff.csv (path/value per record)."""
    out_dir.mkdir(parents=True, exist_ok=True)
    json_path = out_dir / "handoff.json"
    csv_path = out_dir / "handoff.csv"

    payload = {
        "exported_at": datetime.now().isoformat(timespec="seconds"),
        "results": [r.model_dump(by_alias=True) for r in results],
    }
    json_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["record", "path", "value"])
        for i, r in enumerate(results):
            for path, value in flatten(r.model_dump(by_alias=True)):
                w.writerow([i, path, _cell(value)])
    return json_path, csv_path
