"""输出文件命名规则。"""

from __future__ import annotations

from datetime import datetime, timezone

from maze_batch.core.config import ARTIFACT_PREFIXES, ArtifactKind, BatchConfiguration
from maze_batch.core.exceptions import InvalidConfigurationError

ARTIFACT_EXTENSION = ".svg"


def artifact_name(kind: ArtifactKind, config: BatchConfiguration, seed: int) -> str:
    """生成单个产物的文件名，名称内嵌种子，因此同一批次内不会重复。"""

    prefix = ARTIFACT_PREFIXES.get(kind)
    if prefix is None:
        raise InvalidConfigurationError(f"未知的输出类型: {kind}")

    sizes = "_".join(str(value) for value in config.size_values())
    return f"{prefix}_maze_{config.shape}_{sizes}_{seed}{ARTIFACT_EXTENSION}"


def archive_name(
    config: BatchConfiguration,
    algorithm_name: str,
    timestamp: datetime,
    extension: str = "zip",
) -> str:
    """生成压缩包名称：算法名 形状 尺寸 时间戳。"""

    shape_name = config.shape[:1].upper() + config.shape[1:]
    sizes = "x".join(str(value) for value in config.size_values())
    return f"{algorithm_name} {shape_name} {sizes} {format_timestamp(timestamp)}.{extension}"


def format_timestamp(timestamp: datetime) -> str:
    """ISO-8601 截断到秒（UTC），冒号替换为短横线。"""

    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return timestamp.isoformat(timespec="seconds").replace(":", "-")
