"""批量生成任务的配置模型与形状/算法目录。"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

from maze_batch.core.exceptions import InvalidConfigurationError

LOGGER = logging.getLogger(__name__)

ArtifactKind = str  # maze | solution | distance

KIND_MAZE: ArtifactKind = "maze"
KIND_SOLUTION: ArtifactKind = "solution"
KIND_DISTANCE: ArtifactKind = "distance"

# 顺序决定进度步数与文件前缀的生成顺序。
ARTIFACT_KINDS: Tuple[ArtifactKind, ...] = (KIND_MAZE, KIND_SOLUTION, KIND_DISTANCE)

ARTIFACT_PREFIXES = {
    KIND_MAZE: "Map",
    KIND_SOLUTION: "Sol",
    KIND_DISTANCE: "Dist",
}

EXITS_NONE = "none"
EXITS_VERTICAL = "vertical"
EXITS_HORIZONTAL = "horizontal"
EXITS_HARDEST = "hardest"

EXIT_CONFIGS = {
    EXITS_VERTICAL: "Vertical",
    EXITS_HORIZONTAL: "Horizontal",
    EXITS_HARDEST: "Hardest",
}

MAX_SEEDS = 100
RANDOM_SEED_MIN = 1
RANDOM_SEED_MAX = 999999
RANDOM_COUNT_RANGE = (1, 100)
DEFAULT_RANDOM_COUNT = 5

SEED_PRESETS = {
    "first-10": "1,2,3,4,5,6,7,8,9,10",
    "first-25": ",".join(str(i) for i in range(1, 26)),
    "lucky": "7,77,777,7777,77777,777777",
    "classic": "42,123,256,1337,2024,31337,65535",
}


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """单个尺寸参数的取值范围。"""

    min: int
    max: int
    initial: int


@dataclass(frozen=True, slots=True)
class ShapeSpec:
    """网格形状的参数定义。参数字典的顺序即声明顺序。"""

    description: str
    parameters: Mapping[str, ParameterSpec]
    default_algorithm: str


@dataclass(frozen=True, slots=True)
class AlgorithmSpec:
    """生成算法的描述与适用形状。"""

    description: str
    shapes: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MazeCatalog:
    """形状与算法目录，负责尺寸默认值与算法回退。"""

    shapes: Mapping[str, ShapeSpec]
    algorithms: Mapping[str, AlgorithmSpec]

    def shape(self, name: str) -> ShapeSpec:
        try:
            return self.shapes[name]
        except KeyError:
            raise InvalidConfigurationError(f"未知的形状: {name}") from None

    def build_size(self, shape: str, overrides: Optional[Mapping[str, int]] = None) -> dict[str, int]:
        """按形状的参数声明顺序生成尺寸字典，缺省值取 initial。"""

        spec = self.shape(shape)
        overrides = dict(overrides or {})

        unknown = sorted(set(overrides) - set(spec.parameters))
        if unknown:
            raise InvalidConfigurationError(f"形状 {shape} 不支持的尺寸参数: {', '.join(unknown)}")

        size: dict[str, int] = {}
        for name, param in spec.parameters.items():
            value = int(overrides.get(name, param.initial))
            if not param.min <= value <= param.max:
                raise InvalidConfigurationError(
                    f"尺寸参数 {name} 必须位于 {param.min} 与 {param.max} 之间，当前为 {value}"
                )
            size[name] = value
        return size

    def available_algorithms(self, shape: str) -> list[str]:
        return [algorithm_id for algorithm_id, algo in self.algorithms.items() if shape in algo.shapes]

    def algorithm_for(self, shape: str, algorithm: Optional[str]) -> str:
        """返回适用于该形状的算法；不适用时回退到形状默认算法。"""

        spec = self.shape(shape)
        if algorithm and algorithm in self.available_algorithms(shape):
            return algorithm
        if algorithm:
            LOGGER.info("算法 %s 不适用于形状 %s，改用默认算法 %s", algorithm, shape, spec.default_algorithm)
        return spec.default_algorithm

    def algorithm_display_name(self, algorithm: str) -> str:
        algo = self.algorithms.get(algorithm)
        if algo and algo.description:
            return algo.description
        return algorithm


DEFAULT_CATALOG = MazeCatalog(
    shapes={
        "square": ShapeSpec(
            description="Square Grid",
            parameters={
                "width": ParameterSpec(min=2, max=50, initial=10),
                "height": ParameterSpec(min=2, max=50, initial=10),
            },
            default_algorithm="recursiveBacktrack",
        ),
    },
    algorithms={
        "binaryTree": AlgorithmSpec(description="Binary Tree", shapes=("square",)),
        "sidewinder": AlgorithmSpec(description="Sidewinder", shapes=("square",)),
        "aldousBroder": AlgorithmSpec(description="Aldous Broder", shapes=("square",)),
        "recursiveBacktrack": AlgorithmSpec(description="Recursive Backtrack", shapes=("square",)),
    },
)


@dataclass(frozen=True, slots=True)
class BatchConfiguration:
    """单次批量生成的不可变配置。"""

    shape: str
    size: Mapping[str, int]
    algorithm: str
    exit_config: str = EXITS_VERTICAL
    kinds: Sequence[ArtifactKind] = (KIND_MAZE,)

    def kinds_in_order(self) -> list[ArtifactKind]:
        """按固定顺序返回请求的输出类型。"""

        return [kind for kind in ARTIFACT_KINDS if kind in self.kinds]

    def size_values(self) -> list[int]:
        return list(self.size.values())


@dataclass(slots=True)
class OutputConfig:
    """输出目录与冲突策略配置。"""

    output_dir: Path
    conflict_strategy: str = "rename"  # overwrite | skip | rename
    report_filename: Optional[str] = "report.csv"
