"""Loading the allow-listed symbol universe from the stock list file."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from quotepoll.core.exceptions import UniverseLoadError
from quotepoll.core.models.market import MarketSegment, SymbolDescriptor


def _segment_of(value: object) -> MarketSegment:
    # the stock list only distinguishes listed ("twse") from everything else
    if str(value).strip().lower() in {"twse", "tse"}:
        return MarketSegment.TWSE
    return MarketSegment.OTC


def _descriptor_from_entry(entry: Mapping[str, object]) -> SymbolDescriptor | None:
    code = entry.get("id")
    if code is None:
        return None
    try:
        return SymbolDescriptor(
            code=str(code),
            name=str(entry.get("name") or code),
            segment=_segment_of(entry.get("type", "twse")),
        )
    except ValidationError:
        return None


def read_stock_list(path: Path) -> list[SymbolDescriptor]:
    """Parse ``[{"id", "name", "type"}, ...]`` into descriptors, in file order."""
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise UniverseLoadError(f"Stock list '{path}' does not exist", str(path)) from exc
    except (OSError, ValueError) as exc:
        raise UniverseLoadError(f"Unable to read stock list '{path}': {exc}", str(path)) from exc

    if not isinstance(payload, list):
        raise UniverseLoadError(f"Stock list '{path}' must be a JSON array", str(path))

    descriptors: list[SymbolDescriptor] = []
    for entry in payload:
        descriptor = _descriptor_from_entry(entry) if isinstance(entry, Mapping) else None
        if descriptor is None:
            logger.warning(f"Ignoring malformed stock list entry: {entry!r}")
            continue
        descriptors.append(descriptor)
    return descriptors


def filter_allowed(descriptors: Iterable[SymbolDescriptor], allow_list: Sequence[str]) -> list[SymbolDescriptor]:
    """Keep allow-listed codes in input order, dropping repeated codes."""
    allowed = set(allow_list)
    selected: list[SymbolDescriptor] = []
    seen: set[str] = set()
    for descriptor in descriptors:
        if allowed and descriptor.code not in allowed:
            continue
        if descriptor.code in seen:
            continue
        seen.add(descriptor.code)
        selected.append(descriptor)
    return selected


def default_descriptors(allow_list: Sequence[str]) -> list[SymbolDescriptor]:
    codes = list(dict.fromkeys(code.strip() for code in allow_list if code.strip()))
    return [SymbolDescriptor(code=code, name=code, segment=MarketSegment.TWSE) for code in codes]


def load_universe(path: Path | str, allow_list: Sequence[str]) -> list[SymbolDescriptor]:
    """Return the allow-listed symbols of the stock list.

    When the list holds none of the allow-listed codes, descriptors are built
    from the allow-list itself. An empty allow-list keeps every symbol.
    """
    stock_list = read_stock_list(Path(path))
    selected = filter_allowed(stock_list, allow_list)
    logger.info(f"{len(selected)} of {len(stock_list)} listed symbols are allow-listed")

    if not selected and allow_list:
        logger.warning("No allow-listed symbols in the stock list; using the allow-list directly")
        return default_descriptors(allow_list)
    return selected


__all__ = ["default_descriptors", "filter_allowed", "load_universe", "read_stock_list"]
