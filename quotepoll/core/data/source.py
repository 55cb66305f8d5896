"""Quote sources answering one round trip for a batch of symbols."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol

import httpx
from loguru import logger

from quotepoll.core.config.settings import SourceConfig
from quotepoll.core.exceptions import QuoteSourceError
from quotepoll.core.models.market import SymbolDescriptor
from quotepoll.core.models.series import RawQuote


class QuoteSource(Protocol):
    """Anything able to return raw quotes for a batch of symbols.

    The response may omit symbols; absence means "no data this round trip".
    """

    async def fetch(self, symbols: Sequence[SymbolDescriptor]) -> list[RawQuote]: ...


class TwseQuoteSource:
    """Realtime quotes from the TWSE market information system (MIS)."""

    name = "twse-mis"

    def __init__(
        self,
        config: SourceConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or SourceConfig()
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "TwseQuoteSource":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def build_params(symbols: Sequence[SymbolDescriptor]) -> dict[str, str]:
        return {"ex_ch": "|".join(symbol.query_key for symbol in symbols), "json": "1", "delay": "0"}

    async def fetch(self, symbols: Sequence[SymbolDescriptor]) -> list[RawQuote]:
        if not symbols:
            return []

        client = self._ensure_client()
        params = self.build_params(symbols)
        try:
            response = await client.get(self.config.base_url, params=params)
        except httpx.TimeoutException as exc:
            raise QuoteSourceError(
                f"Quote request timed out after {self.config.timeout}s",
                self.name,
                details={"symbols": len(symbols)},
            ) from exc
        except httpx.HTTPError as exc:
            raise QuoteSourceError(f"Quote request failed: {exc}", self.name) from exc

        if response.status_code >= 400:
            raise QuoteSourceError(
                f"Quote request returned HTTP {response.status_code}",
                self.name,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise QuoteSourceError("Quote response is not valid JSON", self.name) from exc

        messages = payload.get("msgArray") if isinstance(payload, dict) else None
        if not isinstance(messages, list):
            raise QuoteSourceError(
                "Quote response has no msgArray",
                self.name,
                details={"rtcode": payload.get("rtcode") if isinstance(payload, dict) else None},
            )

        records = [record for record in messages if isinstance(record, dict)]
        logger.debug(f"{self.name} answered {len(records)}/{len(symbols)} symbols")
        return records


__all__ = ["QuoteSource", "TwseQuoteSource"]
