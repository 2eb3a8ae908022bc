"""Run report written next to a generated pyramid."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

from zoomtiler.core.models import PyramidReport, TilingConfig


def report_to_dict(
    report: PyramidReport,
    *,
    config: TilingConfig,
    source: Optional[Path] = None,
) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "created_at": datetime.now(timezone.utc).isoformat(),
        "source": str(source) if source is not None else None,
        "generation_params": config.to_dict(),
    }
    payload.update(report.to_dict())
    return {key: value for key, value in payload.items() if value is not None}


def write_report(
    report: PyramidReport,
    path: Path,
    *,
    config: TilingConfig,
    source: Optional[Path] = None,
    indent: int = 2,
) -> Path:
    payload = report_to_dict(report, config=config, source=source)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=indent, sort_keys=True), encoding="utf-8")
    return path
