"""环节二：测试文件命名规则与形状/算法目录。"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from maze_batch.core.config import (
    DEFAULT_CATALOG,
    KIND_DISTANCE,
    KIND_MAZE,
    KIND_SOLUTION,
    AlgorithmSpec,
    BatchConfiguration,
    MazeCatalog,
    ParameterSpec,
    ShapeSpec,
)
from maze_batch.core.exceptions import InvalidConfigurationError
from maze_batch.core.naming import archive_name, artifact_name


def make_config(size: dict[str, int] | None = None, shape: str = "square") -> BatchConfiguration:
    return BatchConfiguration(
        shape=shape,
        size=size or {"width": 4, "height": 3},
        algorithm="recursiveBacktrack",
        kinds=(KIND_MAZE,),
    )


def test_artifact_names_use_kind_prefixes() -> None:
    config = make_config()

    assert artifact_name(KIND_MAZE, config, 7) == "Map_maze_square_4_3_7.svg"
    assert artifact_name(KIND_SOLUTION, config, 7) == "Sol_maze_square_4_3_7.svg"
    assert artifact_name(KIND_DISTANCE, config, 7) == "Dist_maze_square_4_3_7.svg"


def test_artifact_name_follows_size_declaration_order() -> None:
    config = make_config(size={"height": 3, "width": 4})

    assert artifact_name(KIND_MAZE, config, 1) == "Map_maze_square_3_4_1.svg"


def test_artifact_name_rejects_unknown_kind() -> None:
    with pytest.raises(InvalidConfigurationError):
        artifact_name("sketch", make_config(), 1)


def test_archive_name_combines_algorithm_shape_size_and_timestamp() -> None:
    timestamp = datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)

    name = archive_name(make_config(), "Recursive Backtrack", timestamp)

    assert name == "Recursive Backtrack Square 4x3 2024-05-06T07-08-09.zip"


def test_archive_name_timestamp_is_utc() -> None:
    timestamp = datetime(2024, 5, 6, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))

    name = archive_name(make_config(shape="circle", size={"layers": 10}), "Wilson", timestamp, extension="tar")

    assert name == "Wilson Circle 10 2024-05-06T07-00-00.tar"


def test_build_size_uses_schema_order_and_initial_values() -> None:
    size = DEFAULT_CATALOG.build_size("square", {"height": 20})

    assert list(size) == ["width", "height"]
    assert size == {"width": 10, "height": 20}


def test_build_size_rejects_unknown_and_out_of_range_parameters() -> None:
    with pytest.raises(InvalidConfigurationError, match="layers"):
        DEFAULT_CATALOG.build_size("square", {"layers": 3})
    with pytest.raises(InvalidConfigurationError, match="width"):
        DEFAULT_CATALOG.build_size("square", {"width": 500})
    with pytest.raises(InvalidConfigurationError):
        DEFAULT_CATALOG.build_size("dodecahedron")


def test_algorithm_falls_back_to_shape_default() -> None:
    catalog = MazeCatalog(
        shapes={
            "square": ShapeSpec("Square", {"width": ParameterSpec(2, 50, 10)}, "recursiveBacktrack"),
            "circle": ShapeSpec("Circle", {"layers": ParameterSpec(1, 20, 10)}, "wilson"),
        },
        algorithms={
            "binaryTree": AlgorithmSpec("Binary Tree", ("square",)),
            "recursiveBacktrack": AlgorithmSpec("Recursive Backtrack", ("square", "circle")),
            "wilson": AlgorithmSpec("Wilson", ("square", "circle")),
        },
    )

    assert catalog.algorithm_for("square", "binaryTree") == "binaryTree"
    assert catalog.algorithm_for("circle", "binaryTree") == "wilson"
    assert catalog.algorithm_for("circle", None) == "wilson"
    assert catalog.available_algorithms("circle") == ["recursiveBacktrack", "wilson"]


def test_algorithm_display_name_falls_back_to_id() -> None:
    assert DEFAULT_CATALOG.algorithm_display_name("binaryTree") == "Binary Tree"
    assert DEFAULT_CATALOG.algorithm_display_name("mystery") == "mystery"
