from __future__ import annotations

import itertools

import pytest

from quotepoll.core.models.series import MISSING, CanonicalRow, Slot
from quotepoll.core.services.normalizer import QuoteNormalizer
from quotepoll.core.services.reconciler import MergeAction, Reconciler, merge_rows, resolve

SLOT_SAMPLES: list[Slot] = [MISSING, 0, 100, 104.5]


@pytest.fixture
def reconciler() -> Reconciler:
    return Reconciler()


@pytest.mark.parametrize(("existing", "new"), list(itertools.product(SLOT_SAMPLES, repeat=2)))
def test_preference_law(existing: Slot, new: Slot) -> None:
    expected = existing if (new is MISSING and existing is not MISSING) else new
    assert resolve(existing, new) == expected


def test_missing_never_overwrites_known_value() -> None:
    assert resolve(104, MISSING) == 104
    assert resolve(MISSING, MISSING) is MISSING
    assert resolve(MISSING, 10) == 10
    assert resolve(10, 11) == 11


def test_scenario_placeholder_close_keeps_stored_close(reconciler: Reconciler) -> None:
    existing = [CanonicalRow.from_list(["20250101", 100, 105, 99, 104, 5000])]
    fetched = QuoteNormalizer().normalize({"c": "X", "d": "20250101", "o": "-", "h": "-", "l": "-", "z": "-", "v": "6000"})
    assert fetched is not None

    merged = reconciler.merge(existing, fetched.row)

    assert [row.to_list() for row in merged] == [["20250101", 100, 105, 99, 104, 6000]]


def test_scenario_empty_series_gets_row_appended(reconciler: Reconciler) -> None:
    row = CanonicalRow("20250102", 10, 11, 9, 10.5, 700)

    result = reconciler.merge_with_action([], row)

    assert result.series == [row]
    assert result.action is MergeAction.APPENDED


def test_merge_replaces_row_in_place_and_preserves_order(reconciler: Reconciler) -> None:
    series = [
        CanonicalRow("20250103", 1, 1, 1, 1, 1),
        CanonicalRow("20250101", 2, 2, 2, 2, 2),
        CanonicalRow("20250102", 3, 3, 3, 3, 3),
    ]

    result = reconciler.merge_with_action(series, CanonicalRow("20250101", MISSING, 9, MISSING, 8, MISSING))

    assert result.action is MergeAction.UPDATED
    assert [row.date for row in result.series] == ["20250103", "20250101", "20250102"]
    assert result.series[1] == CanonicalRow("20250101", 2, 9, 2, 8, 2)
    assert result.row == result.series[1]


def test_merge_does_not_mutate_input(reconciler: Reconciler) -> None:
    series = [CanonicalRow("20250101", 1, 1, 1, 1, 1)]
    snapshot = list(series)

    reconciler.merge(series, CanonicalRow("20250102", 2, 2, 2, 2, 2))
    reconciler.merge(series, CanonicalRow("20250101", 5, 5, 5, 5, 5))

    assert series == snapshot


def test_unsorted_series_appends_new_dates_at_the_end(reconciler: Reconciler) -> None:
    series = [CanonicalRow("20250105", 1, 1, 1, 1, 1)]

    merged = reconciler.merge(series, CanonicalRow("20250101", 2, 2, 2, 2, 2))

    assert [row.date for row in merged] == ["20250105", "20250101"]


@pytest.mark.parametrize(
    "row",
    [
        CanonicalRow("20250101", 1, 2, 3, 4, 5),
        CanonicalRow("20250101", MISSING, MISSING, MISSING, MISSING, 7),
        CanonicalRow("20250109", 1, MISSING, 3, MISSING, 5),
    ],
)
def test_merge_is_idempotent(reconciler: Reconciler, row: CanonicalRow) -> None:
    series = [CanonicalRow("20250101", 10, 20, 30, 40, 50)]

    once = reconciler.merge(series, row)
    twice = reconciler.merge(once, row)

    assert twice == once


def test_dates_stay_unique_across_merge_sequences(reconciler: Reconciler) -> None:
    dates = ["20250101", "20250102", "20250101", "20250103", "20250102", "20250101"]
    series: list[CanonicalRow] = []

    for offset, date in enumerate(dates):
        close: Slot = MISSING if offset % 2 else offset
        series = reconciler.merge(series, CanonicalRow(date, offset, offset, offset, close, offset))

    assert len(series) == len({row.date for row in series}) == 3


def test_merge_rows_rejects_mismatched_dates() -> None:
    with pytest.raises(ValueError):
        merge_rows(CanonicalRow("20250101"), CanonicalRow("20250102"))
