"""HTTP client for the suggestion oracle (Anthropic Messages API)."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

import httpx

from ...config import settings
from ...errors import OracleError, OracleUnavailableError, OracleValidationError
from ...models.domain import GeoPoint
from ..planning.models import OptimizationSuggestion, PlacementSuggestion, PlanningParameters, ReorgPlan
from ..planning.snapshot import Snapshot
from .prompts import build_drift_prompt, build_placement_prompt, build_reorg_prompt
from .validation import extract_json, validate_drift, validate_placement, validate_reorg

logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT")


@dataclass(frozen=True, slots=True)
class Accepted(Generic[PayloadT]):
    payload: PayloadT


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: str


OracleResult = Union[Accepted[PayloadT], Rejected]


class SuggestionOracle:
    """Sends one prompt per planning call and validates the answer against the snapshot.

    The ``propose_*`` methods never raise for oracle failures; they return
    :class:`Rejected` so the caller can fall back to the deterministic planners.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        api_version: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.oracle_api_key
        if not self.api_key:
            raise ValueError("Suggestion oracle API key is not configured.")
        self.base_url = (base_url or settings.oracle_base_url).rstrip("/")
        self.model = model or settings.oracle_model
        self.api_version = api_version or settings.oracle_api_version
        self.timeout = timeout if timeout is not None else settings.oracle_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 10.0)),
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": self.api_version,
                "content-type": "application/json",
            },
            transport=self._transport,
        )

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        body = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        async with self._get_client() as client:
            try:
                response = await asyncio.wait_for(client.post("/v1/messages", json=body), timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                raise OracleUnavailableError(f"oracle timed out after {self.timeout:.1f}s") from exc
            except httpx.HTTPStatusError as exc:
                raise OracleUnavailableError(f"oracle answered HTTP {exc.response.status_code}") from exc
            except httpx.HTTPError as exc:
                raise OracleUnavailableError(f"oracle request failed: {exc}") from exc
            except ValueError as exc:
                raise OracleValidationError("oracle envelope is not JSON") from exc

        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, list):
            raise OracleValidationError("oracle envelope has no content list")
        for block in content:
            if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
                return block["text"]
        raise OracleValidationError("no text content in oracle response")

    async def _propose(
        self,
        kind: str,
        prompt: str,
        max_tokens: int,
        validate: Callable[[dict[str, Any]], PayloadT],
    ) -> OracleResult[PayloadT]:
        try:
            text = await self._complete(prompt, max_tokens)
            payload = validate(extract_json(text))
        except OracleError as exc:
            logger.warning("Oracle %s suggestion rejected (%s): %s", kind, type(exc).__name__, exc)
            return Rejected(reason=str(exc))
        logger.info("Oracle %s suggestion accepted", kind)
        return Accepted(payload)

    async def propose_placement(
        self,
        snapshot: Snapshot,
        location: GeoPoint,
        address: str,
        params: PlanningParameters,
    ) -> OracleResult[PlacementSuggestion]:
        return await self._propose(
            "placement",
            build_placement_prompt(location, address, snapshot),
            settings.oracle_max_tokens_placement,
            lambda data: validate_placement(data, snapshot, location, params),
        )

    async def propose_drift(self, snapshot: Snapshot) -> OracleResult[list[OptimizationSuggestion]]:
        return await self._propose(
            "drift",
            build_drift_prompt(snapshot),
            settings.oracle_max_tokens_drift,
            lambda data: validate_drift(data, snapshot),
        )

    async def propose_reorg(self, snapshot: Snapshot) -> OracleResult[ReorgPlan]:
        return await self._propose(
            "reorg",
            build_reorg_prompt(snapshot),
            settings.oracle_max_tokens_reorg,
            lambda data: validate_reorg(data, snapshot),
        )

    async def check_health(self) -> bool:
        """Return True when the oracle endpoint accepts our credentials."""
        async with self._get_client() as client:
            try:
                response = await client.get("/v1/models")
                return response.status_code == 200
            except httpx.HTTPError:
                return False
