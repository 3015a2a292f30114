"""输出写入与冲突处理模块。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from itertools import count
from pathlib import Path
from typing import Optional

from maze_batch.core.config import OutputConfig
from maze_batch.core.exceptions import InvalidConfigurationError, PackagingFailure

LOGGER = logging.getLogger(__name__)

CONFLICT_STRATEGIES = {"overwrite", "skip", "rename"}


class ArtifactWriteError(PackagingFailure):
    """输出写入失败。"""


@dataclass(slots=True)
class DestinationDecision:
    """封装输出文件决策。"""

    destination: Path
    action: str
    note: Optional[str] = None


class OutputManager:
    """负责处理输出目录、冲突策略与文件写入。"""

    def __init__(self, config: OutputConfig) -> None:
        if config.conflict_strategy not in CONFLICT_STRATEGIES:
            raise InvalidConfigurationError(f"未知的冲突策略: {config.conflict_strategy}")
        self.config = config
        self.output_dir = config.output_dir.resolve()

    def decide_destination(self, name: str) -> DestinationDecision:
        """根据冲突策略确定输出路径。"""

        destination = self.output_dir / Path(name).name

        if not destination.exists():
            return DestinationDecision(destination=destination, action="write")

        strategy = self.config.conflict_strategy
        existing_msg = f"目标已存在: {destination.name}"

        if strategy == "overwrite":
            return DestinationDecision(destination=destination, action="overwrite", note=existing_msg)
        if strategy == "skip":
            return DestinationDecision(destination=destination, action="skip", note=existing_msg)

        new_destination = self._generate_renamed_path(destination)
        return DestinationDecision(
            destination=new_destination,
            action="rename",
            note=f"{existing_msg} -> 重命名为 {new_destination.name}",
        )

    def write_bytes(self, data: bytes, destination: Path) -> None:
        """将字节内容写入磁盘。"""

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_bytes(data)
        except OSError as exc:
            raise ArtifactWriteError(f"写入文件失败: {destination}") from exc
        LOGGER.debug("已写出 %s（%d 字节）", destination, len(data))

    def _generate_renamed_path(self, destination: Path) -> Path:
        """在 rename 策略下生成新的文件名。"""

        stem = destination.stem
        suffix = destination.suffix

        for idx in count(1):
            candidate = destination.with_name(f"{stem}_{idx}{suffix}")
            if not candidate.exists():
                return candidate

        # 理论上不会执行到此处
        return destination
