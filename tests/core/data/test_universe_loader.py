"""Tests for loading the allow-listed symbol universe."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from quotepoll.core.data.universe import default_descriptors, filter_allowed, load_universe, read_stock_list
from quotepoll.core.exceptions import UniverseLoadError
from quotepoll.core.models.market import MarketSegment


@pytest.fixture
def stock_list(tmp_path: Path) -> Path:
    path = tmp_path / "stock_list.json"
    path.write_text(
        json.dumps(
            [
                {"id": "2330", "name": "台積電", "type": "twse"},
                {"id": "6488", "name": "環球晶", "type": "otc"},
                {"id": "2317", "name": "鴻海", "type": "twse"},
                {"name": "no id"},
                "garbage",
                {"id": "2330", "name": "台積電", "type": "twse"},
            ],
            ensure_ascii=False,
        ),
        encoding="utf-8",
    )
    return path


def test_read_stock_list_skips_malformed_entries(stock_list: Path) -> None:
    descriptors = read_stock_list(stock_list)

    assert [item.code for item in descriptors] == ["2330", "6488", "2317", "2330"]
    assert descriptors[1].segment is MarketSegment.OTC
    assert descriptors[1].query_key == "otc_6488.tw"


def test_load_universe_keeps_file_order_and_dedups(stock_list: Path) -> None:
    universe = load_universe(stock_list, ["2317", "2330", "9999"])

    assert [item.code for item in universe] == ["2330", "2317"]
    assert universe[0].name == "台積電"


def test_empty_allow_list_keeps_every_symbol(stock_list: Path) -> None:
    assert [item.code for item in load_universe(stock_list, [])] == ["2330", "6488", "2317"]


def test_no_match_falls_back_to_allow_list(stock_list: Path) -> None:
    universe = load_universe(stock_list, ["0050", "0056", "0050"])

    assert [item.code for item in universe] == ["0050", "0056"]
    assert all(item.segment is MarketSegment.TWSE for item in universe)
    assert universe[0].name == "0050"


def test_missing_stock_list_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(UniverseLoadError) as exc_info:
        load_universe(tmp_path / "absent.json", ["2330"])

    assert exc_info.value.error_code == "UNIVERSE_LOAD_ERROR"


@pytest.mark.parametrize("content", ["[", '{"id": "2330"}'])
def test_unreadable_stock_list_is_fatal(tmp_path: Path, content: str) -> None:
    path = tmp_path / "stock_list.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(UniverseLoadError):
        read_stock_list(path)


def test_filter_and_defaults_helpers(stock_list: Path) -> None:
    descriptors = read_stock_list(stock_list)

    assert [item.code for item in filter_allowed(descriptors, ["6488"])] == ["6488"]
    assert [item.code for item in default_descriptors([" 2330 ", "", "2330"])] == ["2330"]
