"""批量生成流程：解析种子、逐个调用引擎生成迷宫并派生各类 SVG 产物。"""

from __future__ import annotations

import logging
import random
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence

from maze_batch.core.config import (
    DEFAULT_CATALOG,
    KIND_DISTANCE,
    KIND_MAZE,
    KIND_SOLUTION,
    MAX_SEEDS,
    ArtifactKind,
    BatchConfiguration,
    MazeCatalog,
)
from maze_batch.core.exceptions import (
    EngineFailure,
    MissingEndpoints,
    NoArtifactKindSelected,
    SeedCountOutOfBounds,
)
from maze_batch.core.models import Artifact, BatchRunState, SeedError
from maze_batch.core.naming import artifact_name
from maze_batch.core.progress import ProgressUpdate
from maze_batch.core.seeds import SeedSpecification, resolve_seeds
from maze_batch.engine.base import (
    METADATA_END_CELL,
    METADATA_START_CELL,
    Cell,
    GridSpec,
    MazeEngine,
    MazeHandle,
)
from maze_batch.engine.svg import DEFAULT_SVG_SIZE, SvgSurface

LOGGER = logging.getLogger(__name__)

ProgressCallback = Optional[Callable[[ProgressUpdate], None]]

CONSISTENCY_TEST_SEED = 123


class BatchGenerator:
    """批量生成器，持有本次会话的运行状态与重入保护。"""

    def __init__(
        self,
        engine: MazeEngine,
        catalog: MazeCatalog = DEFAULT_CATALOG,
        surface_size: int = DEFAULT_SVG_SIZE,
    ) -> None:
        self.engine = engine
        self.catalog = catalog
        self.surface_size = surface_size
        self.state: Optional[BatchRunState] = None
        self._guard = threading.Lock()

    @property
    def is_generating(self) -> bool:
        return self._guard.locked()

    def generate_batch(
        self,
        config: BatchConfiguration,
        seed_spec: SeedSpecification,
        progress_callback: ProgressCallback = None,
        rng: Optional[random.Random] = None,
    ) -> Optional[BatchRunState]:
        """校验输入并执行一次完整的批量生成。

        输入不合法时直接抛出异常，不会生成任何内容；已有任务在执行时返回 None。
        """

        if self.is_generating:
            LOGGER.warning("已有批量任务在执行，忽略本次请求")
            return None

        _require_kinds(config)
        seeds = resolve_seeds(seed_spec, rng=rng)
        LOGGER.debug("解析得到种子：%s", seeds)
        return self.run_batch(config, seeds, progress_callback)

    def run_batch(
        self,
        config: BatchConfiguration,
        seeds: Sequence[int],
        progress_callback: ProgressCallback = None,
    ) -> Optional[BatchRunState]:
        """按顺序为每个种子生成迷宫，单个种子的失败不会中断整个批次。"""

        if not self._guard.acquire(blocking=False):
            LOGGER.warning("已有批量任务在执行，忽略本次请求")
            return None

        try:
            kinds = _require_kinds(config)
            _require_seed_count(seeds)

            state = BatchRunState(total_steps=len(seeds) * len(kinds))
            self.state = state
            total = len(seeds)
            LOGGER.info("开始批量生成：%d 个种子，输出类型 %s", total, ", ".join(kinds))
            _emit_progress(progress_callback, state, f"Starting generation of {total} mazes...")

            for index, seed in enumerate(seeds, start=1):
                slot_end = index * len(kinds)
                _emit_progress(
                    progress_callback,
                    state,
                    f"Generating maze {index} of {total} (seed: {seed})...",
                )
                try:
                    self._generate_seed(config, seed, kinds, state, progress_callback)
                except (EngineFailure, MissingEndpoints) as exc:
                    LOGGER.warning("种子 %s 生成失败：%s", seed, exc)
                    state.errors.append(SeedError(seed=seed, message=str(exc)))
                    state.completed_steps = slot_end
                    _emit_progress(progress_callback, state, f"Failed maze {index} of {total} (seed: {seed})")
                    continue

                _emit_progress(progress_callback, state, f"Generated maze {index} of {total} (seed: {seed})")

            LOGGER.info("批量生成完成：成功 %d 个文件，失败 %d 个种子", len(state.artifacts), len(state.errors))
            _emit_progress(progress_callback, state, "Generation complete", status="completed")
            return state
        finally:
            self._guard.release()

    def render_artifact(self, handle: MazeHandle, kind: ArtifactKind) -> str:
        """从已生成的迷宫句柄派生指定类型的 SVG。"""

        if kind == KIND_MAZE:
            return self._render(handle)
        if kind == KIND_SOLUTION:
            return self._render_solution(handle)
        if kind == KIND_DISTANCE:
            return self._render_distance(handle)
        raise ValueError(f"未知的输出类型: {kind}")

    def build_maze(self, config: BatchConfiguration, seed: int) -> MazeHandle:
        """构建并完整运行一个迷宫。"""

        grid = GridSpec(shape=config.shape, size=dict(config.size))
        with _engine_call("构建迷宫"):
            handle = self.engine.create_maze(grid, config.algorithm, seed, config.exit_config)
            handle.run_to_completion()
        return handle

    def check_seed_consistency(self, config: BatchConfiguration, seed: int = CONSISTENCY_TEST_SEED) -> bool:
        """用同一种子生成两次迷宫，比较 SVG 是否完全一致。"""

        first = self._render(self.build_maze(config, seed))
        second = self._render(self.build_maze(config, seed))
        consistent = first == second
        if consistent:
            LOGGER.info("种子一致性检查通过（seed=%d）", seed)
        else:
            LOGGER.warning("种子一致性检查失败（seed=%d）", seed)
        return consistent

    def _generate_seed(
        self,
        config: BatchConfiguration,
        seed: int,
        kinds: Sequence[ArtifactKind],
        state: BatchRunState,
        progress_callback: ProgressCallback,
    ) -> None:
        handle = self.build_maze(config, seed)
        for kind in kinds:
            content = self.render_artifact(handle, kind)
            state.artifacts.append(
                Artifact(name=artifact_name(kind, config, seed), content=content, seed=seed, kind=kind)
            )
            state.completed_steps += 1
            _emit_progress(progress_callback, state)

    def _render(self, handle: MazeHandle) -> str:
        surface = SvgSurface(self.surface_size, self.surface_size)
        with _engine_call("渲染"):
            handle.render(surface)
        return surface.to_markup()

    def _render_solution(self, handle: MazeHandle) -> str:
        start = _find_marked_cell(handle, METADATA_START_CELL)
        end = _find_marked_cell(handle, METADATA_END_CELL)
        if start is None or end is None:
            raise MissingEndpoints("No start/end cells found")

        with _overlay(handle.clear_path_and_solution):
            with _engine_call("寻路"):
                handle.find_path_between(start.coords, end.coords)
            return self._render(handle)

    def _render_distance(self, handle: MazeHandle) -> str:
        origin = _find_marked_cell(handle, METADATA_START_CELL)
        if origin is None:
            with _engine_call("选取随机单元格"):
                origin = handle.random_cell()

        with _overlay(handle.clear_distances):
            with _engine_call("距离计算"):
                handle.find_distances_from(origin.coords)
            return self._render(handle)


@contextmanager
def _engine_call(action: str) -> Iterator[None]:
    """把引擎抛出的任意异常统一包装为 EngineFailure，只有单种子级别的错误原样抛出。"""

    try:
        yield
    except (EngineFailure, MissingEndpoints):
        raise
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("引擎调用失败（%s）：%s", action, exc)
        raise EngineFailure(str(exc) or f"{action}失败") from exc


@contextmanager
def _overlay(clear: Callable[[], None]) -> Iterator[None]:
    """叠加层是句柄级状态，离开作用域时必须清除。"""

    try:
        yield
    finally:
        with _engine_call("清除叠加层"):
            clear()


def _find_marked_cell(handle: MazeHandle, flag: str) -> Optional[Cell]:
    found: list[Cell] = []

    def visitor(cell: Cell) -> None:
        if cell.metadata.get(flag):
            found.append(cell)

    with _engine_call("遍历单元格"):
        handle.for_each_cell(visitor)
    return found[-1] if found else None


def _require_kinds(config: BatchConfiguration) -> list[ArtifactKind]:
    kinds = config.kinds_in_order()
    if not kinds:
        raise NoArtifactKindSelected("Please select at least one generation option")
    return kinds


def _require_seed_count(seeds: Sequence[int]) -> None:
    if not seeds:
        raise SeedCountOutOfBounds("Please provide at least one seed")
    if len(seeds) > MAX_SEEDS:
        raise SeedCountOutOfBounds(f"Maximum {MAX_SEEDS} seeds allowed")


def _emit_progress(
    callback: ProgressCallback,
    state: BatchRunState,
    message: Optional[str] = None,
    status: str = "running",
) -> None:
    if not callback:
        return
    callback(
        ProgressUpdate(
            total=state.total_steps,
            completed=state.completed_steps,
            message=message,
            status=status,
        )
    )
