"""Merge a freshly fetched row into a stored daily series.

Merging never regresses data: a missing value in the new row keeps the stored
value, while any known value in the new row replaces what was stored.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from quotepoll.core.models.series import MISSING, CanonicalRow, Series, Slot


class MergeAction(str, Enum):
    """How a row landed in the series."""

    APPENDED = "appended"
    UPDATED = "updated"


@dataclass(frozen=True)
class MergeResult:
    series: Series
    row: CanonicalRow
    action: MergeAction


def resolve(existing: Slot, new: Slot) -> Slot:
    if new is MISSING and existing is not MISSING:
        return existing
    return new


def merge_rows(existing: CanonicalRow, new: CanonicalRow) -> CanonicalRow:
    """Slot-wise :func:`resolve` of two rows sharing a date."""
    if existing.date != new.date:
        raise ValueError(f"cannot merge rows for different dates: {existing.date} != {new.date}")
    return new.with_values([resolve(old, fresh) for old, fresh in zip(existing.values, new.values)])


def find_row(series: Sequence[CanonicalRow], date: str) -> int | None:
    for index, row in enumerate(series):
        if row.date == date:
            return index
    return None


class Reconciler:
    """Applies the value-preference rule to a series without side effects."""

    def merge_with_action(self, series: Sequence[CanonicalRow], row: CanonicalRow) -> MergeResult:
        updated = list(series)
        index = find_row(updated, row.date)
        if index is None:
            updated.append(row)
            return MergeResult(series=updated, row=row, action=MergeAction.APPENDED)

        merged = merge_rows(updated[index], row)
        updated[index] = merged
        return MergeResult(series=updated, row=merged, action=MergeAction.UPDATED)

    def merge(self, series: Sequence[CanonicalRow], row: CanonicalRow) -> Series:
        return self.merge_with_action(series, row).series


__all__ = ["MergeAction", "MergeResult", "Reconciler", "find_row", "merge_rows", "resolve"]
