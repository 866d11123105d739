"""
Tests for previous/next hearing dates
=====================================
"""

import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest

from legal_diary.services.hearing_sequencer import (
    attach_neighbors,
    compute_neighbors,
    compute_neighbors_by_case,
)
from legal_diary.utils.exceptions import ValidationError

CASE_A = uuid.UUID("00000000-0000-0000-0000-00000000000a")
CASE_B = uuid.UUID("00000000-0000-0000-0000-00000000000b")


def hearing(hid, case_id, day):
    return SimpleNamespace(id=hid, case_id=case_id, hearing_date=day)


class TestComputeNeighbors:
    def test_middle_hearing_has_both_neighbors(self):
        """Case with hearings on 01-10, 02-05, 03-01"""
        hearings = [
            hearing("h2", CASE_A, datetime(2026, 2, 5)),
            hearing("h3", CASE_A, datetime(2026, 3, 1)),
            hearing("h1", CASE_A, datetime(2026, 1, 10)),
        ]

        result = compute_neighbors(hearings)

        assert [r.id for r in result] == ["h1", "h2", "h3"]
        middle = result[1]
        assert middle.previous_date == datetime(2026, 1, 10)
        assert middle.current_date == datetime(2026, 2, 5)
        assert middle.next_date == datetime(2026, 3, 1)
        assert result[0].previous_date is None
        assert result[-1].next_date is None

    def test_single_hearing_has_no_neighbors(self):
        result = compute_neighbors([hearing("h1", CASE_A, datetime(2026, 1, 10))])

        assert len(result) == 1
        assert result[0].previous_date is None
        assert result[0].next_date is None

    def test_empty_input(self):
        assert compute_neighbors([]) == []

    def test_same_day_ties_broken_by_id(self):
        same_day = datetime(2026, 1, 10)
        result = compute_neighbors([
            hearing("b", CASE_A, same_day),
            hearing("a", CASE_A, same_day),
        ])

        assert [r.id for r in result] == ["a", "b"]
        assert result[0].next_date == same_day
        assert result[1].previous_date == same_day

    def test_neighbor_ordering_holds(self):
        days = [datetime(2026, m, d) for m, d in [(4, 2), (1, 9), (3, 3), (1, 9), (12, 1)]]
        result = compute_neighbors([hearing(f"h{i}", CASE_A, d) for i, d in enumerate(days)])

        for item in result:
            if item.previous_date is not None:
                assert item.previous_date <= item.current_date
            if item.next_date is not None:
                assert item.current_date <= item.next_date

    def test_mixed_cases_rejected(self):
        with pytest.raises(ValidationError):
            compute_neighbors([
                hearing("h1", CASE_A, datetime(2026, 1, 10)),
                hearing("h2", CASE_B, datetime(2026, 1, 11)),
            ])

    def test_missing_date_rejected(self):
        with pytest.raises(ValidationError):
            compute_neighbors([hearing("h1", CASE_A, None)])


class TestBatchVariants:
    def test_partitions_by_case(self):
        hearings = [
            hearing("a1", CASE_A, datetime(2026, 1, 10)),
            hearing("b1", CASE_B, datetime(2026, 1, 12)),
            hearing("a2", CASE_A, datetime(2026, 1, 20)),
        ]

        result = compute_neighbors_by_case(hearings)

        assert result["a1"].next_date == datetime(2026, 1, 20)
        assert result["a2"].previous_date == datetime(2026, 1, 10)
        # Case B's only hearing does not see case A's dates
        assert result["b1"].previous_date is None
        assert result["b1"].next_date is None

    def test_attach_neighbors_keeps_target_order(self):
        today = datetime(2026, 2, 5)
        targets = [hearing("b2", CASE_B, today), hearing("a2", CASE_A, today)]
        related = [
            hearing("a1", CASE_A, datetime(2026, 1, 10)),
            hearing("a2", CASE_A, today),
            hearing("a3", CASE_A, datetime(2026, 3, 1)),
            hearing("b1", CASE_B, datetime(2026, 1, 2)),
        ]

        result = attach_neighbors(targets, related)

        assert [r.id for r in result] == ["b2", "a2"]
        assert result[0].previous_date == datetime(2026, 1, 2)
        assert result[0].next_date is None
        assert result[1].previous_date == datetime(2026, 1, 10)
        assert result[1].next_date == datetime(2026, 3, 1)
