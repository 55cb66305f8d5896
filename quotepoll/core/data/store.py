"""Flat-file persistence of per-symbol daily series."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from loguru import logger

from quotepoll.core.exceptions import StoreReadError
from quotepoll.core.models.series import CanonicalRow, Series


class SeriesStore(Protocol):
    """Loads and fully rewrites the series of one symbol."""

    def load(self, code: str) -> Series: ...

    def save(self, code: str, series: Sequence[CanonicalRow]) -> None: ...


class JsonSeriesStore:
    """Stores each series as ``<data_dir>/<code>/<filename>``.

    The file holds a pretty-printed JSON array of
    ``[date, open, high, low, close, volume]`` rows, with ``"-"`` for
    missing values.
    """

    def __init__(self, data_dir: Path | str, filename: str = "realtime.json") -> None:
        self.data_dir = Path(data_dir)
        self.filename = filename

    def path_for(self, code: str) -> Path:
        return self.data_dir / code / self.filename

    def read(self, code: str) -> Series:
        """Strict read: a missing file is an empty series, anything unreadable raises."""
        path = self.path_for(code)
        if not path.exists():
            return []

        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StoreReadError(f"Unable to read series file: {exc}", code, str(path)) from exc

        if not isinstance(payload, list):
            raise StoreReadError("Series file does not contain a JSON array", code, str(path))

        series: Series = []
        for index, item in enumerate(payload):
            if not isinstance(item, list):
                logger.bind(symbol=code).warning(f"Skipping malformed row #{index} in {path}: {item!r}")
                continue
            try:
                series.append(CanonicalRow.from_list(item))
            except ValueError as exc:
                logger.bind(symbol=code).warning(f"Skipping malformed row #{index} in {path}: {exc}")
        return series

    def load(self, code: str) -> Series:
        try:
            return self.read(code)
        except StoreReadError as error:
            logger.bind(symbol=code, error_code=error.error_code).warning(
                f"{error.message}; treating {code} as an empty series"
            )
            return []

    def save(self, code: str, series: Sequence[CanonicalRow]) -> None:
        path = self.path_for(code)
        path.parent.mkdir(parents=True, exist_ok=True)
        rows = [row.to_list() for row in series]
        path.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.bind(symbol=code).info(f"Saved {len(rows)} rows to {path}")


__all__ = ["JsonSeriesStore", "SeriesStore"]
