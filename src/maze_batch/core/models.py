"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from maze_batch.core.config import ArtifactKind


@dataclass(frozen=True, slots=True)
class Artifact:
    """单个生成结果：文件名与 SVG 文本。"""

    name: str
    content: str
    seed: int
    kind: ArtifactKind


@dataclass(frozen=True, slots=True)
class SeedError:
    """记录单个种子的失败信息。"""

    seed: int
    message: str

    def __str__(self) -> str:
        return f"Seed {self.seed}: {self.message}"


@dataclass(slots=True)
class BatchRunState:
    """一次批量生成过程中的状态，每次运行开始时重置。"""

    artifacts: list[Artifact] = field(default_factory=list)
    errors: list[SeedError] = field(default_factory=list)
    total_steps: int = 0
    completed_steps: int = 0

    @property
    def progress(self) -> float:
        if self.total_steps == 0:
            return 1.0
        return self.completed_steps / self.total_steps

    def artifact_names(self) -> list[str]:
        return [artifact.name for artifact in self.artifacts]


@dataclass(slots=True)
class EmittedFile:
    """打包阶段写出的单个文件记录。"""

    name: str
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None


@dataclass(slots=True)
class PackageResult:
    """打包结果：archive 模式只有一个文件，individual 模式每个产物一个文件。"""

    mode: str  # archive | individual
    files: list[EmittedFile]

    @property
    def archive_name(self) -> Optional[str]:
        if self.mode != "archive" or not self.files:
            return None
        return self.files[0].name
