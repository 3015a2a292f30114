"""种子解析：把四种输入方式转换为有序的整数种子列表。"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from maze_batch.core.config import (
    DEFAULT_RANDOM_COUNT,
    MAX_SEEDS,
    RANDOM_COUNT_RANGE,
    RANDOM_SEED_MAX,
    RANDOM_SEED_MIN,
)
from maze_batch.core.exceptions import InvalidConfigurationError, InvalidSeedInput, SeedCountOutOfBounds

# 与网页版 parseInt 一致：只取开头的整数部分，其后的字符忽略。
LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

RawInt = Union[int, str, None]


@dataclass(frozen=True, slots=True)
class ExplicitListSeeds:
    """逗号分隔的显式种子列表。"""

    tokens: Sequence[str]

    @classmethod
    def from_text(cls, text: str) -> "ExplicitListSeeds":
        return cls(tokens=tuple(text.split(",")))


@dataclass(frozen=True, slots=True)
class RangeSeeds:
    """起止范围，步长缺省为 1，方向由 start 与 end 的大小决定。"""

    start: RawInt
    end: RawInt
    step: RawInt = None


@dataclass(frozen=True, slots=True)
class RandomSeeds:
    """在 [1, 999999] 内不重复地随机抽取 count 个种子。"""

    count: RawInt = None


@dataclass(frozen=True, slots=True)
class PresetSeeds:
    """预设的逗号分隔文本，解析方式与显式列表相同。"""

    text: str


SeedSpecification = Union[ExplicitListSeeds, RangeSeeds, RandomSeeds, PresetSeeds]


def resolve_seeds(spec: SeedSpecification, rng: Optional[random.Random] = None) -> list[int]:
    """将种子输入解析为整数列表，任何非法输入都整体失败。"""

    if isinstance(spec, ExplicitListSeeds):
        return _parse_tokens(spec.tokens)
    if isinstance(spec, PresetSeeds):
        return _parse_tokens(spec.text.split(",")) if spec.text else []
    if isinstance(spec, RangeSeeds):
        return _range_seeds(spec)
    if isinstance(spec, RandomSeeds):
        return _random_seeds(spec, rng or random.Random())

    raise InvalidConfigurationError(f"未知的种子输入方式: {type(spec).__name__}")


def preview_seeds(seeds: Sequence[int], limit: int = 10) -> str:
    """返回前 limit 个种子的预览文本，超出部分以 ... 表示。"""

    preview = ", ".join(str(seed) for seed in seeds[:limit])
    if len(seeds) > limit:
        return f"{preview}..."
    return preview


def describe_seed_count(count: int) -> str:
    return f"({count} seed{'' if count == 1 else 's'})"


def parse_int(value: RawInt) -> Optional[int]:
    """宽松地解析整数，无法解析时返回 None。"""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = LEADING_INT_RE.match(value)
    if not match:
        return None
    return int(match.group(1))


def _parse_tokens(tokens: Sequence[str]) -> list[int]:
    cleaned = [token.strip() for token in tokens]
    seeds: list[int] = []
    for token in cleaned:
        if not token:
            continue
        value = parse_int(token)
        if value is None:
            raise InvalidSeedInput(f"Invalid seed: {token}")
        seeds.append(value)
    return seeds


def _range_seeds(spec: RangeSeeds) -> list[int]:
    start = parse_int(spec.start)
    end = parse_int(spec.end)
    if start is None or end is None:
        raise InvalidSeedInput("Please enter valid start and end values")

    # 只有显式给出的非正步长才报错，缺省或无法解析时按 1 处理。
    step = parse_int(spec.step)
    if step is None:
        step = 1
    if step <= 0:
        raise InvalidSeedInput("Step value must be positive")

    # 超过上限的区间不展开。
    if abs(end - start) // step + 1 > MAX_SEEDS:
        raise SeedCountOutOfBounds(f"Maximum {MAX_SEEDS} seeds allowed")

    if start <= end:
        return list(range(start, end + 1, step))
    return list(range(start, end - 1, -step))


def _random_seeds(spec: RandomSeeds, rng: random.Random) -> list[int]:
    count = parse_int(spec.count)
    if count is None:
        count = DEFAULT_RANDOM_COUNT

    low, high = RANDOM_COUNT_RANGE
    if count < low or count > high:
        raise InvalidSeedInput(f"Count must be between {low} and {high}")

    seeds: list[int] = []
    used: set[int] = set()
    while len(seeds) < count:
        candidate = rng.randint(RANDOM_SEED_MIN, RANDOM_SEED_MAX)
        if candidate in used:
            continue
        used.add(candidate)
        seeds.append(candidate)

    return sorted(seeds)
