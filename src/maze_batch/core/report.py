"""报告生成工具。"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional

from maze_batch.core.models import BatchRunState

LOGGER = logging.getLogger(__name__)

HEADER = ["name", "seed", "kind", "status", "message"]


def format_summary(state: BatchRunState) -> str:
    """生成可读的结果摘要：成功数量、失败数量以及逐条错误。"""

    lines = [
        "Generation Complete!",
        f"Successfully generated: {len(state.artifacts)} files",
        f"Errors: {len(state.errors)}",
    ]
    if state.errors:
        lines.append("Errors:")
        lines.extend(str(error) for error in state.errors)
    return "\n".join(lines)


def write_csv_report(state: BatchRunState, output_dir: Path, filename: str) -> Optional[Path]:
    """将生成结果写入 CSV 报告，写入失败只记录日志。"""

    report_path = output_dir / filename
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        with report_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(HEADER)
            for artifact in state.artifacts:
                writer.writerow([artifact.name, artifact.seed, artifact.kind, "generated", ""])
            for error in state.errors:
                writer.writerow(["", error.seed, "", "error", error.message])
    except OSError as exc:
        LOGGER.error("写入报告失败：%s", exc)
        return None
    return report_path
