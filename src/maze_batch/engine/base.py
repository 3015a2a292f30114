"""外部迷宫引擎的接口约定。

批量生成流程只通过这里定义的接口与引擎交互，不依赖引擎内部的网格表示。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Protocol, Tuple

from maze_batch.engine.svg import SvgSurface

METADATA_START_CELL = "startCell"
METADATA_END_CELL = "endCell"

Coords = Tuple[int, ...]


@dataclass(frozen=True, slots=True)
class GridSpec:
    """网格描述：形状与按声明顺序排列的尺寸参数。"""

    shape: str
    size: Mapping[str, int]


class Cell(Protocol):
    coords: Coords
    metadata: Mapping[str, Any]


class MazeHandle(ABC):
    """单个迷宫的句柄。路径与距离叠加层是句柄级状态，使用后必须清除。"""

    @abstractmethod
    def run_to_completion(self) -> None:
        """同步执行生成算法直到结束。"""

    @abstractmethod
    def for_each_cell(self, visitor: Callable[[Cell], None]) -> None:
        ...

    @abstractmethod
    def find_path_between(self, start: Coords, end: Coords) -> None:
        ...

    @abstractmethod
    def clear_path_and_solution(self) -> None:
        ...

    @abstractmethod
    def find_distances_from(self, coords: Coords) -> None:
        ...

    @abstractmethod
    def random_cell(self) -> Cell:
        ...

    @abstractmethod
    def clear_distances(self) -> None:
        ...

    @abstractmethod
    def render(self, surface: SvgSurface) -> None:
        """把当前可视状态（含叠加层）绘制到 surface。"""


class MazeEngine(ABC):
    """迷宫引擎工厂。"""

    @abstractmethod
    def create_maze(self, grid: GridSpec, algorithm: str, seed: int, exit_config: str) -> MazeHandle:
        ...
