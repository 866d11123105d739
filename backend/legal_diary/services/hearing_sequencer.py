"""
services/hearing_sequencer.py

Previous/next hearing dates per case.

Works on anything shaped like a Hearing row (``id``, ``case_id``,
``hearing_date``). Results are recomputed on every call; hearings get added,
moved and deleted between requests so nothing is cached.

Ordering: hearing_date ascending, ties broken by str(id).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from legal_diary.utils.exceptions import ValidationError


@dataclass(frozen=True)
class HearingWithNeighbors:
    hearing: Any
    previous_date: Optional[datetime]
    next_date: Optional[datetime]

    @property
    def id(self):
        return self.hearing.id

    @property
    def case_id(self):
        return self.hearing.case_id

    @property
    def current_date(self) -> datetime:
        return self.hearing.hearing_date


def _sort_key(hearing) -> tuple:
    return (hearing.hearing_date, str(hearing.id))


def _validate(hearings: Iterable) -> list:
    items = list(hearings)
    for h in items:
        if getattr(h, "hearing_date", None) is None:
            raise ValidationError(f"Hearing {h.id} has no hearing date")
        if getattr(h, "case_id", None) is None:
            raise ValidationError(f"Hearing {h.id} has no case")
    return items


def compute_neighbors(hearings: Iterable) -> list[HearingWithNeighbors]:
    """Neighbors within a single case's hearing set, returned in date order."""
    items = _validate(hearings)
    if len({h.case_id for h in items}) > 1:
        raise ValidationError("compute_neighbors expects hearings of a single case")

    ordered = sorted(items, key=_sort_key)
    last = len(ordered) - 1
    return [
        HearingWithNeighbors(
            hearing=h,
            previous_date=ordered[i - 1].hearing_date if i > 0 else None,
            next_date=ordered[i + 1].hearing_date if i < last else None,
        )
        for i, h in enumerate(ordered)
    ]


def compute_neighbors_by_case(hearings: Iterable) -> dict:
    """Batch variant: partitions by case first. Returns {hearing_id: HearingWithNeighbors}."""
    by_case: dict = defaultdict(list)
    for h in _validate(hearings):
        by_case[h.case_id].append(h)

    result: dict = {}
    for case_hearings in by_case.values():
        for enriched in compute_neighbors(case_hearings):
            result[enriched.id] = enriched
    return result


def attach_neighbors(targets: Iterable, related: Iterable) -> list[HearingWithNeighbors]:
    """
    Enrich ``targets`` (e.g. today's hearings) using every hearing of their
    cases in ``related``. Output keeps the order of ``targets``.

    Targets missing from ``related`` are added to their case's set so a
    caller passing an incomplete sibling list still gets a consistent answer.
    """
    targets = _validate(targets)
    pool = {h.id: h for h in _validate(related)}
    for h in targets:
        pool.setdefault(h.id, h)

    neighbors = compute_neighbors_by_case(pool.values())
    return [
        HearingWithNeighbors(
            hearing=h,
            previous_date=neighbors[h.id].previous_date,
            next_date=neighbors[h.id].next_date,
        )
        for h in targets
    ]
