"""Tests for chunk planning."""

import pytest

from crystal_transfer.engine.planner import BlockRange, plan_chunks


def spans(start: int, target: int, chunk_size: int) -> list[tuple[int, int]]:
    return [(chunk.start, chunk.end) for chunk in plan_chunks(start, target, chunk_size)]


class TestPlanChunks:
    def test_fixed_size_chunks_overrun_target(self) -> None:
        assert spans(0, 250, 100) == [(0, 99), (100, 199), (200, 299)]

    def test_start_equal_to_target_plans_nothing(self) -> None:
        assert spans(250, 250, 100) == []

    def test_start_past_target_plans_nothing(self) -> None:
        assert spans(251, 250, 100) == []

    def test_exact_multiple(self) -> None:
        assert spans(0, 200, 100) == [(0, 99), (100, 199)]

    def test_resume_from_destination_cursor(self) -> None:
        assert spans(151, 250, 100) == [(151, 250)]

    def test_chunk_size_one(self) -> None:
        assert spans(3, 6, 1) == [(3, 3), (4, 4), (5, 5)]

    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_non_positive_chunk_size_rejected(self, chunk_size: int) -> None:
        with pytest.raises(ValueError, match="chunk_size"):
            plan_chunks(0, 250, chunk_size)

    def test_negative_start_rejected(self) -> None:
        with pytest.raises(ValueError, match="start"):
            plan_chunks(-1, 250, 100)

    def test_lazy(self) -> None:
        chunks = plan_chunks(0, 10**15, 100)

        assert next(chunks) == BlockRange(0, 99)
        assert next(chunks) == BlockRange(100, 199)


class TestBlockRange:
    def test_len_and_str(self) -> None:
        chunk = BlockRange(100, 199)

        assert len(chunk) == 100
        assert str(chunk) == "100..=199"

    @pytest.mark.parametrize(("start", "end"), [(-1, 5), (10, 9)])
    def test_invalid(self, start: int, end: int) -> None:
        with pytest.raises(ValueError):
            BlockRange(start, end)
