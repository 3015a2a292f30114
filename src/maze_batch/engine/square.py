"""内置的方形网格迷宫引擎。

给定相同的配置与种子，生成与渲染结果完全一致。
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from maze_batch.core.config import EXITS_HARDEST, EXITS_HORIZONTAL, EXITS_NONE, EXITS_VERTICAL
from maze_batch.engine.base import (
    METADATA_END_CELL,
    METADATA_START_CELL,
    Coords,
    GridSpec,
    MazeEngine,
    MazeHandle,
)
from maze_batch.engine.svg import SvgSurface

LOGGER = logging.getLogger(__name__)

SHAPE_SQUARE = "square"
MARGIN = 10

WALL_COLOUR = "black"
PATH_COLOUR = "#dc143c"
START_COLOUR = "#2e8b57"
END_COLOUR = "#4169e1"

DIRS = {
    "N": (0, -1),
    "S": (0, 1),
    "E": (1, 0),
    "W": (-1, 0),
}


@dataclass(slots=True)
class SquareCell:
    """方形网格中的单元格，links 为已打通墙壁的相邻坐标。"""

    coords: Tuple[int, int]
    metadata: Dict[str, bool] = field(default_factory=dict)
    links: set = field(default_factory=set)


class SquareMaze(MazeHandle):
    """方形网格迷宫句柄。"""

    def __init__(self, width: int, height: int, algorithm: str, seed: int, exit_config: str) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"Invalid grid size: {width}x{height}")
        self.width = width
        self.height = height
        self.algorithm = algorithm
        self.exit_config = exit_config
        self._rng = random.Random(seed)
        self._cells: Dict[Tuple[int, int], SquareCell] = {
            (x, y): SquareCell(coords=(x, y)) for y in range(height) for x in range(width)
        }
        self._completed = False
        self._path: List[Tuple[int, int]] = []
        self._distances: Dict[Tuple[int, int], int] = {}

    # -- 生成 ---------------------------------------------------------------

    def run_to_completion(self) -> None:
        if self._completed:
            return
        ALGORITHMS[self.algorithm](self)
        self._place_exits()
        self._completed = True

    def neighbours(self, coords: Tuple[int, int]) -> List[Tuple[int, int]]:
        x, y = coords
        return [
            (x + dx, y + dy)
            for dx, dy in DIRS.values()
            if 0 <= x + dx < self.width and 0 <= y + dy < self.height
        ]

    def link(self, a: Tuple[int, int], b: Tuple[int, int]) -> None:
        self._cells[a].links.add(b)
        self._cells[b].links.add(a)

    def _place_exits(self) -> None:
        if self.exit_config == EXITS_NONE:
            return
        if self.exit_config == EXITS_VERTICAL:
            start = (self._rng.randrange(self.width), self.height - 1)
            end = (self._rng.randrange(self.width), 0)
        elif self.exit_config == EXITS_HORIZONTAL:
            start = (0, self._rng.randrange(self.height))
            end = (self.width - 1, self._rng.randrange(self.height))
        elif self.exit_config == EXITS_HARDEST:
            start = _farthest(self._bfs((0, 0))[0])
            end = _farthest(self._bfs(start)[0])
        else:
            raise ValueError(f"Unknown exit config: {self.exit_config}")

        self._cells[start].metadata[METADATA_START_CELL] = True
        self._cells[end].metadata[METADATA_END_CELL] = True

    # -- 查询与叠加层 -------------------------------------------------------

    def for_each_cell(self, visitor: Callable[[SquareCell], None]) -> None:
        for cell in self._cells.values():
            visitor(cell)

    def random_cell(self) -> SquareCell:
        return self._rng.choice(list(self._cells.values()))

    def find_path_between(self, start: Coords, end: Coords) -> None:
        start_key = self._key(start)
        end_key = self._key(end)
        _, parent = self._bfs(start_key)
        if end_key != start_key and end_key not in parent:
            raise ValueError(f"No path between {start_key} and {end_key}")

        path = [end_key]
        while path[-1] != start_key:
            path.append(parent[path[-1]])
        path.reverse()
        self._path = path

    def clear_path_and_solution(self) -> None:
        self._path = []

    def find_distances_from(self, coords: Coords) -> None:
        self._distances, _ = self._bfs(self._key(coords))

    def clear_distances(self) -> None:
        self._distances = {}

    def _key(self, coords: Coords) -> Tuple[int, int]:
        key = (int(coords[0]), int(coords[1]))
        if key not in self._cells:
            raise ValueError(f"Coordinates outside the grid: {coords}")
        return key

    def _bfs(self, origin: Tuple[int, int]):
        distances = {origin: 0}
        parent: Dict[Tuple[int, int], Tuple[int, int]] = {}
        queue = deque([origin])
        while queue:
            current = queue.popleft()
            for nxt in sorted(self._cells[current].links):
                if nxt in distances:
                    continue
                distances[nxt] = distances[current] + 1
                parent[nxt] = current
                queue.append(nxt)
        return distances, parent

    # -- 渲染 ---------------------------------------------------------------

    def render(self, surface: SvgSurface) -> None:
        cell_size = min(
            (surface.width - 2 * MARGIN) / self.width,
            (surface.height - 2 * MARGIN) / self.height,
        )

        def corner(x: float, y: float) -> Tuple[float, float]:
            return MARGIN + x * cell_size, MARGIN + y * cell_size

        if self._distances:
            max_distance = max(self._distances.values()) or 1
            for (x, y), distance in sorted(self._distances.items(), key=lambda item: (item[0][1], item[0][0])):
                shade = int(255 * distance / max_distance)
                left, top = corner(x, y)
                surface.rect(left, top, cell_size, cell_size, f"rgb({shade},{shade},255)", css_class="distance")

        for cell in self._cells.values():
            cx, cy = corner(cell.coords[0] + 0.5, cell.coords[1] + 0.5)
            if cell.metadata.get(METADATA_START_CELL):
                surface.circle(cx, cy, cell_size / 4, START_COLOUR, css_class="start")
            if cell.metadata.get(METADATA_END_CELL):
                surface.circle(cx, cy, cell_size / 4, END_COLOUR, css_class="end")

        if self._path:
            points = [corner(x + 0.5, y + 0.5) for x, y in self._path]
            surface.polyline(points, PATH_COLOUR, width=max(cell_size / 6, 1), css_class="solution-path")

        surface.line(*corner(0, 0), *corner(self.width, 0), stroke=WALL_COLOUR)
        surface.line(*corner(0, 0), *corner(0, self.height), stroke=WALL_COLOUR)
        for (x, y), cell in self._cells.items():
            if (x + 1, y) not in cell.links:
                surface.line(*corner(x + 1, y), *corner(x + 1, y + 1), stroke=WALL_COLOUR)
            if (x, y + 1) not in cell.links:
                surface.line(*corner(x, y + 1), *corner(x + 1, y + 1), stroke=WALL_COLOUR)


def _farthest(distances: Dict[Tuple[int, int], int]) -> Tuple[int, int]:
    return max(sorted(distances), key=lambda coords: distances[coords])


def _binary_tree(maze: SquareMaze) -> None:
    for y in range(maze.height):
        for x in range(maze.width):
            candidates = [c for c in ((x, y - 1), (x + 1, y)) if c in maze._cells]
            if candidates:
                maze.link((x, y), maze._rng.choice(candidates))


def _sidewinder(maze: SquareMaze) -> None:
    for y in range(maze.height):
        run: List[Tuple[int, int]] = []
        for x in range(maze.width):
            run.append((x, y))
            at_east = x == maze.width - 1
            at_north = y == 0
            close_out = at_east or (not at_north and maze._rng.random() < 0.5)
            if close_out:
                member = maze._rng.choice(run)
                if not at_north:
                    maze.link(member, (member[0], member[1] - 1))
                run = []
            else:
                maze.link((x, y), (x + 1, y))


def _aldous_broder(maze: SquareMaze) -> None:
    current = maze._rng.choice(list(maze._cells))
    unvisited = len(maze._cells) - 1
    while unvisited:
        neighbour = maze._rng.choice(maze.neighbours(current))
        if not maze._cells[neighbour].links:
            maze.link(current, neighbour)
            unvisited -= 1
        current = neighbour


def _recursive_backtrack(maze: SquareMaze) -> None:
    start = maze._rng.choice(list(maze._cells))
    visited = {start}
    stack = [start]
    while stack:
        current = stack[-1]
        unvisited = [n for n in maze.neighbours(current) if n not in visited]
        if not unvisited:
            stack.pop()
            continue
        nxt = maze._rng.choice(unvisited)
        maze.link(current, nxt)
        visited.add(nxt)
        stack.append(nxt)


ALGORITHMS: Dict[str, Callable[[SquareMaze], None]] = {
    "binaryTree": _binary_tree,
    "sidewinder": _sidewinder,
    "aldousBroder": _aldous_broder,
    "recursiveBacktrack": _recursive_backtrack,
}


class SquareMazeEngine(MazeEngine):
    """方形网格引擎工厂。"""

    def create_maze(self, grid: GridSpec, algorithm: str, seed: int, exit_config: str) -> SquareMaze:
        if grid.shape != SHAPE_SQUARE:
            raise ValueError(f"Unsupported shape: {grid.shape}")
        if algorithm not in ALGORITHMS:
            raise ValueError(f"Unknown algorithm: {algorithm}")

        width: Optional[int] = grid.size.get("width")
        height: Optional[int] = grid.size.get("height")
        if width is None or height is None:
            raise ValueError("Square grids need width and height")

        LOGGER.debug("创建迷宫：%dx%d 算法=%s 种子=%d 出口=%s", width, height, algorithm, seed, exit_config)
        return SquareMaze(int(width), int(height), algorithm, seed, exit_config)
