"""命令行入口。"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from maze_batch.core.config import (
    DEFAULT_CATALOG,
    EXIT_CONFIGS,
    EXITS_NONE,
    KIND_DISTANCE,
    KIND_MAZE,
    KIND_SOLUTION,
    SEED_PRESETS,
    BatchConfiguration,
    OutputConfig,
)
from maze_batch.core.exceptions import InvalidConfigurationError, MazeBatchError, PackagingFailure
from maze_batch.core.models import BatchRunState
from maze_batch.core.output_manager import OutputManager
from maze_batch.core.progress import ProgressUpdate
from maze_batch.core.report import format_summary, write_csv_report
from maze_batch.core.seeds import (
    ExplicitListSeeds,
    PresetSeeds,
    RandomSeeds,
    RangeSeeds,
    SeedSpecification,
    describe_seed_count,
    preview_seeds,
    resolve_seeds,
)
from maze_batch.core.settings import DEFAULT_SETTINGS_PATH, LastUsedSettings, SettingsStore
from maze_batch.engine.square import SquareMazeEngine
from maze_batch.processing.generator import BatchGenerator
from maze_batch.processing.packager import ArchivePackager, ZipArchiver
from maze_batch.utils.logging import setup_logging

app = typer.Typer(help="批量迷宫生成与打包工具。")
settings_app = typer.Typer(help="管理上次使用的生成参数。")
app.add_typer(settings_app, name="settings")

LOGGER = logging.getLogger(__name__)


def _parse_size(values: Optional[List[str]]) -> dict[str, int]:
    size: dict[str, int] = {}
    for raw in values or []:
        name, sep, value = raw.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter("尺寸参数必须形如 width=10")
        try:
            size[name.strip()] = int(value)
        except ValueError as exc:
            raise typer.BadParameter(f"尺寸参数必须为整数: {raw}") from exc
    return size


def _build_seed_spec(
    seeds: Optional[str],
    start: Optional[str],
    end: Optional[str],
    step: Optional[str],
    random_count: Optional[str],
    preset: Optional[str],
) -> SeedSpecification:
    modes = [
        name
        for name, active in (
            ("--seeds", seeds is not None),
            ("--start/--end", start is not None or end is not None),
            ("--random", random_count is not None),
            ("--preset", preset is not None),
        )
        if active
    ]
    if len(modes) > 1:
        raise typer.BadParameter(f"种子输入方式只能选择一种，当前为: {', '.join(modes)}")

    if preset is not None:
        text = SEED_PRESETS.get(preset)
        if text is None:
            raise typer.BadParameter(f"未知的预设: {preset}（可选 {', '.join(SEED_PRESETS)}）")
        return PresetSeeds(text=text)
    if start is not None or end is not None:
        return RangeSeeds(start=start, end=end, step=step)
    if random_count is not None:
        return RandomSeeds(count=random_count)
    return ExplicitListSeeds.from_text(seeds or "")


def _resolve_configuration(
    store: SettingsStore,
    shape: Optional[str],
    size: Optional[List[str]],
    algorithm: Optional[str],
    exits: Optional[str],
    kinds: Tuple[str, ...],
) -> Tuple[BatchConfiguration, LastUsedSettings]:
    settings = store.load().merge(
        shape=shape,
        size=_parse_size(size),
        algorithm=algorithm,
        exit_config=exits,
    )

    try:
        resolved_size = DEFAULT_CATALOG.build_size(settings.shape, settings.size)
        resolved_algorithm = DEFAULT_CATALOG.algorithm_for(settings.shape, settings.algorithm)
    except InvalidConfigurationError as exc:
        typer.echo(f"配置错误：{exc}", err=True)
        raise typer.Exit(code=2) from exc

    if settings.exit_config not in EXIT_CONFIGS and settings.exit_config != EXITS_NONE:
        typer.echo(f"配置错误：未知的出口配置 {settings.exit_config}", err=True)
        raise typer.Exit(code=2)

    settings = replace(settings, size=resolved_size, algorithm=resolved_algorithm)
    config = BatchConfiguration(
        shape=settings.shape,
        size=resolved_size,
        algorithm=resolved_algorithm,
        exit_config=settings.exit_config,
        kinds=kinds,
    )
    return config, settings


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("生成迷宫", total=update.total)
        progress.update(task_id, completed=update.completed)
        if update.message:
            progress.log(update.message)

    return callback


def _write_report(state: BatchRunState, output_manager: OutputManager) -> None:
    """按冲突策略写出 CSV 报告。"""

    decision = output_manager.decide_destination(output_manager.config.report_filename or "report.csv")
    if decision.action == "skip":
        LOGGER.info("跳过报告：%s", decision.note)
        typer.echo(f"报告已存在，跳过：{decision.destination}")
        return

    report_path = write_csv_report(state, decision.destination.parent, decision.destination.name)
    if report_path:
        typer.echo(f"报告文件：{report_path}")


@app.command("generate")
def generate_cli(  # noqa: PLR0913
    output: Path = typer.Option(..., "--output", "-o", help="输出目录"),
    shape: Optional[str] = typer.Option(None, "--shape", help="网格形状，缺省使用上次的设置"),
    size: Optional[List[str]] = typer.Option(None, "--size", "-s", help="尺寸参数，形如 width=10，可指定多个"),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a", help="生成算法"),
    exits: Optional[str] = typer.Option(None, "--exits", help="出口配置 vertical/horizontal/hardest"),
    maze: bool = typer.Option(True, "--maze/--no-maze", help="输出迷宫图"),
    solution: bool = typer.Option(False, "--solution/--no-solution", help="输出带解答路径的迷宫图"),
    distance: bool = typer.Option(False, "--distance/--no-distance", help="输出距离热力图"),
    seeds: Optional[str] = typer.Option(None, "--seeds", help="逗号分隔的种子列表，如 1,2,3"),
    start: Optional[str] = typer.Option(None, "--start", help="种子范围起点"),
    end: Optional[str] = typer.Option(None, "--end", help="种子范围终点"),
    step: Optional[str] = typer.Option(None, "--step", help="种子范围步长，缺省为 1"),
    random_count: Optional[str] = typer.Option(None, "--random", help="随机种子数量 1~100"),
    preset: Optional[str] = typer.Option(None, "--preset", help="预设种子集合名称"),
    use_zip: bool = typer.Option(True, "--zip/--no-zip", help="打包为 zip，关闭时逐个写出 SVG"),
    conflict_strategy: str = typer.Option("rename", "--on-conflict", help="文件名冲突策略"),
    report: bool = typer.Option(True, "--report/--no-report", help="写出 CSV 报告"),
    settings_file: Path = typer.Option(DEFAULT_SETTINGS_PATH, "--settings-file", help="设置文件路径"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """批量生成迷宫并打包输出。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    store = SettingsStore(settings_file)
    kinds = tuple(
        kind for kind, enabled in ((KIND_MAZE, maze), (KIND_SOLUTION, solution), (KIND_DISTANCE, distance)) if enabled
    )
    seed_spec = _build_seed_spec(seeds, start, end, step, random_count, preset)
    config, settings = _resolve_configuration(store, shape, size, algorithm, exits, kinds)
    LOGGER.debug("CLI 参数解析完成：%s", config)
    store.save(settings)

    generator = BatchGenerator(SquareMazeEngine())

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        TimeRemainingColumn(),
    )

    try:
        with progress:
            state = generator.generate_batch(config, seed_spec, progress_callback=_build_progress_callback(progress))
    except MazeBatchError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc

    if state is None:
        typer.echo("已有批量任务在执行。", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_summary(state))

    output_dir = output.expanduser().resolve()
    try:
        output_manager = OutputManager(OutputConfig(output_dir=output_dir, conflict_strategy=conflict_strategy))
    except InvalidConfigurationError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if report:
        _write_report(state, output_manager)

    if not state.artifacts:
        raise typer.Exit(code=1)

    try:
        packager = ArchivePackager(output_manager, archiver=ZipArchiver() if use_zip else None)
        result = packager.package(state.artifacts, config)
    except PackagingFailure as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if result.archive_name:
        typer.echo(f"已写出压缩包：{result.files[0].output_path}（{len(state.artifacts)} 个文件）")
    else:
        typer.echo(f"已逐个写出 {len(result.files)} 个文件到 {output_dir}")


@app.command("preview")
def preview_cli(
    seeds: Optional[str] = typer.Option(None, "--seeds", help="逗号分隔的种子列表"),
    start: Optional[str] = typer.Option(None, "--start", help="种子范围起点"),
    end: Optional[str] = typer.Option(None, "--end", help="种子范围终点"),
    step: Optional[str] = typer.Option(None, "--step", help="种子范围步长"),
    random_count: Optional[str] = typer.Option(None, "--random", help="随机种子数量"),
    preset: Optional[str] = typer.Option(None, "--preset", help="预设种子集合名称"),
) -> None:
    """预览种子解析结果（前 10 个）。"""

    seed_spec = _build_seed_spec(seeds, start, end, step, random_count, preset)
    try:
        resolved = resolve_seeds(seed_spec)
    except MazeBatchError as exc:
        typer.echo("Invalid input")
        typer.echo(describe_seed_count(0))
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(preview_seeds(resolved))
    typer.echo(describe_seed_count(len(resolved)))


@app.command("check-seed")
def check_seed_cli(
    seed: int = typer.Option(123, "--seed", help="用于一致性检查的种子"),
    shape: Optional[str] = typer.Option(None, "--shape", help="网格形状"),
    size: Optional[List[str]] = typer.Option(None, "--size", "-s", help="尺寸参数，形如 width=10"),
    algorithm: Optional[str] = typer.Option(None, "--algorithm", "-a", help="生成算法"),
    exits: Optional[str] = typer.Option(None, "--exits", help="出口配置"),
    settings_file: Path = typer.Option(DEFAULT_SETTINGS_PATH, "--settings-file", help="设置文件路径"),
) -> None:
    """检查同一种子两次生成的迷宫是否完全一致。"""

    setup_logging()
    config, _ = _resolve_configuration(
        SettingsStore(settings_file), shape, size, algorithm, exits, (KIND_MAZE,)
    )
    generator = BatchGenerator(SquareMazeEngine())
    try:
        consistent = generator.check_seed_consistency(config, seed)
    except MazeBatchError as exc:
        typer.echo(f"生成失败：{exc}", err=True)
        raise typer.Exit(code=1) from exc

    if consistent:
        typer.echo("Seed consistency test PASSED - same seed produces same result")
        return
    typer.echo("Seed consistency test FAILED - same seed produces different results")
    raise typer.Exit(code=1)


@app.command("catalog")
def catalog_cli() -> None:
    """列出可用的形状、算法、出口配置与预设种子。"""

    console = Console()

    shapes = Table(title="形状")
    shapes.add_column("名称")
    shapes.add_column("尺寸参数")
    shapes.add_column("默认算法")
    for name, spec in DEFAULT_CATALOG.shapes.items():
        params = ", ".join(f"{p}={v.initial} ({v.min}-{v.max})" for p, v in spec.parameters.items())
        shapes.add_row(name, params, spec.default_algorithm)
    console.print(shapes)

    algorithms = Table(title="算法")
    algorithms.add_column("ID")
    algorithms.add_column("名称")
    algorithms.add_column("适用形状")
    for algorithm_id, algo in DEFAULT_CATALOG.algorithms.items():
        algorithms.add_row(algorithm_id, algo.description, ", ".join(algo.shapes))
    console.print(algorithms)

    exits = Table(title="出口配置")
    exits.add_column("ID")
    exits.add_column("名称")
    for exit_id, description in EXIT_CONFIGS.items():
        exits.add_row(exit_id, description)
    console.print(exits)

    presets = Table(title="预设种子")
    presets.add_column("名称")
    presets.add_column("种子")
    for name, text in SEED_PRESETS.items():
        presets.add_row(name, text)
    console.print(presets)


@settings_app.command("show")
def settings_show_cli(
    settings_file: Path = typer.Option(DEFAULT_SETTINGS_PATH, "--settings-file", help="设置文件路径"),
) -> None:
    """显示已保存的设置。"""

    setup_logging()
    settings = SettingsStore(settings_file).load()
    typer.echo(json.dumps(settings.to_dict(), indent=2, ensure_ascii=False))


@settings_app.command("clear")
def settings_clear_cli(
    settings_file: Path = typer.Option(DEFAULT_SETTINGS_PATH, "--settings-file", help="设置文件路径"),
    yes: bool = typer.Option(False, "--yes", "-y", help="不再确认"),
) -> None:
    """清除已保存的设置，恢复默认值。"""

    setup_logging()
    if not yes and not typer.confirm("确定要清除所有已保存的设置吗？"):
        raise typer.Exit(code=1)

    if SettingsStore(settings_file).clear():
        typer.echo("设置已清除。")
        return
    typer.echo("清除设置失败，请重试。", err=True)
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
