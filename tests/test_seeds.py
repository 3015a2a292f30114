"""环节一：测试种子解析的四种输入方式。"""

from __future__ import annotations

import random

import pytest

from maze_batch.core.exceptions import InvalidSeedInput, SeedCountOutOfBounds
from maze_batch.core.seeds import (
    ExplicitListSeeds,
    PresetSeeds,
    RandomSeeds,
    RangeSeeds,
    describe_seed_count,
    preview_seeds,
    resolve_seeds,
)


def test_explicit_list_parses_comma_separated_tokens() -> None:
    assert resolve_seeds(ExplicitListSeeds.from_text("1, 2, 3")) == [1, 2, 3]


def test_explicit_list_keeps_order_and_duplicates() -> None:
    assert resolve_seeds(ExplicitListSeeds(tokens=("9", " 4", "9 "))) == [9, 4, 9]


def test_explicit_list_drops_empty_tokens() -> None:
    assert resolve_seeds(ExplicitListSeeds.from_text(" 5,, ,6,")) == [5, 6]


def test_blank_explicit_list_resolves_to_empty() -> None:
    assert resolve_seeds(ExplicitListSeeds.from_text("   ")) == []


def test_explicit_list_rejects_and_names_invalid_token() -> None:
    with pytest.raises(InvalidSeedInput, match="abc"):
        resolve_seeds(ExplicitListSeeds.from_text("1, abc, 3"))


def test_leading_integer_prefix_is_accepted() -> None:
    # 与网页版保持一致：只读取开头的整数部分。
    assert resolve_seeds(ExplicitListSeeds.from_text("12abc, -7, +8")) == [12, -7, 8]


def test_preset_is_parsed_like_explicit_list() -> None:
    assert resolve_seeds(PresetSeeds(text="42,123, 777")) == [42, 123, 777]
    assert resolve_seeds(PresetSeeds(text="")) == []


def test_preset_rejects_invalid_token() -> None:
    with pytest.raises(InvalidSeedInput, match="x1"):
        resolve_seeds(PresetSeeds(text="1,x1"))


def test_ascending_range_is_inclusive() -> None:
    assert resolve_seeds(RangeSeeds(start=1, end=10, step=3)) == [1, 4, 7, 10]


def test_descending_range() -> None:
    assert resolve_seeds(RangeSeeds(start=5, end=1, step=2)) == [5, 3, 1]


def test_range_accepts_raw_text() -> None:
    assert resolve_seeds(RangeSeeds(start="3", end=" 6", step="1")) == [3, 4, 5, 6]


def test_single_value_range() -> None:
    assert resolve_seeds(RangeSeeds(start=4, end=4)) == [4]


def test_range_without_step_defaults_to_one() -> None:
    assert resolve_seeds(RangeSeeds(start=1, end=10)) == list(range(1, 11))


def test_range_with_unparseable_step_defaults_to_one() -> None:
    assert resolve_seeds(RangeSeeds(start=1, end=3, step="fast")) == [1, 2, 3]


@pytest.mark.parametrize("step", [0, -2, "0"])
def test_explicit_non_positive_step_is_rejected(step) -> None:
    # 只有显式给出的非正步长才会报错，缺省步长不会。
    with pytest.raises(InvalidSeedInput, match="Step value must be positive"):
        resolve_seeds(RangeSeeds(start=1, end=10, step=step))


@pytest.mark.parametrize("start,end", [("a", 10), (1, None), ("", "")])
def test_range_requires_numeric_bounds(start, end) -> None:
    with pytest.raises(InvalidSeedInput, match="valid start and end"):
        resolve_seeds(RangeSeeds(start=start, end=end))


def test_random_seeds_are_unique_sorted_and_in_bounds() -> None:
    seeds = resolve_seeds(RandomSeeds(count=10), rng=random.Random(7))

    assert len(seeds) == 10
    assert len(set(seeds)) == 10
    assert seeds == sorted(seeds)
    assert all(1 <= seed <= 999999 for seed in seeds)


def test_random_seeds_retry_on_duplicates() -> None:
    class RepeatingRandom(random.Random):
        def __init__(self) -> None:
            super().__init__(0)
            self._values = iter([5, 5, 5, 2, 5, 9])

        def randint(self, a: int, b: int) -> int:
            return next(self._values)

    assert resolve_seeds(RandomSeeds(count=3), rng=RepeatingRandom()) == [2, 5, 9]


def test_random_count_defaults_to_five() -> None:
    assert len(resolve_seeds(RandomSeeds(), rng=random.Random(1))) == 5
    assert len(resolve_seeds(RandomSeeds(count="lots"), rng=random.Random(1))) == 5


@pytest.mark.parametrize("count", [0, 101, -3, "0"])
def test_random_count_out_of_bounds(count) -> None:
    with pytest.raises(InvalidSeedInput, match="Count must be between 1 and 100"):
        resolve_seeds(RandomSeeds(count=count))


def test_preview_truncates_after_ten() -> None:
    assert preview_seeds([1, 2, 3]) == "1, 2, 3"
    assert preview_seeds(list(range(1, 13))) == "1, 2, 3, 4, 5, 6, 7, 8, 9, 10..."
    assert describe_seed_count(1) == "(1 seed)"
    assert describe_seed_count(12) == "(12 seeds)"


def test_range_of_exactly_one_hundred_is_accepted() -> None:
    assert len(resolve_seeds(RangeSeeds(start=100, end=1))) == 100


@pytest.mark.parametrize(
    "start,end,step",
    [(1, 101, None), (1, 10**12, None), (10**12, 1, "7"), (-(10**30), 10**30, 1)],
)
def test_oversized_range_is_rejected_without_expanding(start, end, step) -> None:
    with pytest.raises(SeedCountOutOfBounds, match="Maximum 100 seeds allowed"):
        resolve_seeds(RangeSeeds(start=start, end=end, step=step))
