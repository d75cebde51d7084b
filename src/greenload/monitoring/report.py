"""Monitoring report writer helpers."""
from __future__ import annotations

import json
from pathlib import Path


def write_pipeline_report(payload: dict, out_path: str | Path = "reports/pipeline_report.json") -> Path:
    """Write the pipeline payload as JSON, or as markdown with an embedded JSON block for ``.md`` paths."""
    output = Path(out_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    body = json.dumps(payload, indent=2, default=str)
    if output.suffix.lower() == ".md":
        output.write_text("# Pipeline Report\n\n```json\n" + body + "\n```\n", encoding="utf-8")
    else:
        output.write_text(body + "\n", encoding="utf-8")
    return output
