"""
Partition Fetcher - Queries one ENERGY STAR partition.

Issues a single filtered GET against <base_url>/<partition_id>.json and
converts the JSON array body into normalized records.

Failures are partition-local: fetch() never raises, it returns a
PartitionResult carrying either the records or the error.
"""

import asyncio
import logging
import time
from typing import Any, Iterable, Optional

import aiohttp

from appliance_energy.config import DEFAULT_BASE_URL, EstimatorConfig
from appliance_energy.exceptions import (
    PartitionDecodeError,
    PartitionFetchError,
    RateLimitError,
)
from appliance_energy.models import ApplianceCategory, PartitionResult
from appliance_energy.normalizer import normalize_records
from appliance_energy.taxonomy import CATEGORIES


logger = logging.getLogger(__name__)


BRAND_FILTER_FIELD = "brand_name"
MODEL_FILTER_FIELD = "model_number"


def normalize_filter_value(value: Optional[str]) -> Optional[str]:
    """Trim and upper-case a filter value; blank means no constraint."""
    if value is None:
        return None
    value = value.strip().upper()
    return value or None


def _quote_literal(value: str) -> str:
    """SoQL string literal, single quotes doubled."""
    return "'" + value.replace("'", "''") + "'"


def build_where_clause(
    brand_name: Optional[str] = None,
    model_number: Optional[str] = None,
) -> Optional[str]:
    """
    Build a case-insensitive equality filter.

    Returns:
        "upper(brand_name)='X' AND upper(model_number)='Y'" style clause,
        or None when neither filter is given
    """
    clauses = []

    brand = normalize_filter_value(brand_name)
    if brand is not None:
        clauses.append(f"upper({BRAND_FILTER_FIELD})={_quote_literal(brand)}")

    model = normalize_filter_value(model_number)
    if model is not None:
        clauses.append(f"upper({MODEL_FILTER_FIELD})={_quote_literal(model)}")

    return " AND ".join(clauses) if clauses else None


def build_query_params(
    brand_name: Optional[str] = None,
    model_number: Optional[str] = None,
) -> dict[str, str]:
    """Query parameters for the partition resource."""
    where = build_where_clause(brand_name, model_number)
    return {"$where": where} if where else {}


class PartitionFetcher:
    """
    HTTP client for ENERGY STAR open-data partitions.

    Features:
    - Shared aiohttp session, created lazily
    - Optional retry with exponential backoff (single attempt by default)
    - Tagged per-partition results instead of raised errors
    """

    DEFAULT_TIMEOUT = 30.0
    MAX_ATTEMPTS = 1
    RETRY_BACKOFF_BASE = 2.0

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = MAX_ATTEMPTS,
        retry_backoff_base: float = RETRY_BACKOFF_BASE,
        app_token: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        categories: Iterable[ApplianceCategory] = CATEGORIES,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._retry_backoff_base = retry_backoff_base
        self._app_token = app_token
        self._session = session
        self._owns_session = session is None
        self._categories = tuple(categories)

    @classmethod
    def from_config(
        cls,
        config: EstimatorConfig,
        session: Optional[aiohttp.ClientSession] = None,
        categories: Iterable[ApplianceCategory] = CATEGORIES,
    ) -> "PartitionFetcher":
        """Create a fetcher from runtime configuration."""
        return cls(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_attempts=config.max_attempts,
            retry_backoff_base=config.retry_backoff_base,
            app_token=config.app_token,
            session=session,
            categories=categories,
        )

    def partition_url(self, partition_id: str) -> str:
        return f"{self._base_url}/{partition_id}.json"

    async def fetch(
        self,
        partition_id: str,
        brand_name: Optional[str] = None,
        model_number: Optional[str] = None,
    ) -> PartitionResult:
        """
        Fetch and normalize one partition (main entry point).

        Args:
            partition_id: Upstream partition (dataset) identifier
            brand_name: Optional brand filter, case-insensitive
            model_number: Optional model filter, case-insensitive

        Returns:
            PartitionResult with records on success, error on failure

        Note:
            Never raises - failures are returned in the result
        """
        params = build_query_params(brand_name, model_number)

        try:
            rows = await self._fetch_with_retry(partition_id, params)
            records = normalize_records(rows, partition_id, self._categories)
        except PartitionFetchError as e:
            logger.warning(f"[{partition_id}] Partition failed: {e}")
            return PartitionResult.failure(partition_id, e)
        except Exception as e:
            error = PartitionFetchError(
                message=f"Unexpected error: {e}",
                partition_id=partition_id,
                request_url=self.partition_url(partition_id),
                original_error=e,
            )
            logger.warning(f"[{partition_id}] Partition failed: {error}")
            return PartitionResult.failure(partition_id, error)

        logger.debug(f"[{partition_id}] Normalized {len(records)} records")
        return PartitionResult.success(partition_id, records)

    async def _fetch_with_retry(
        self,
        partition_id: str,
        params: dict[str, str],
    ) -> list[dict[str, Any]]:
        """Fetch with exponential backoff on transient failures."""
        for attempt in range(self._max_attempts):
            try:
                return await self.fetch_raw(partition_id, params)

            except PartitionFetchError as e:
                is_last = attempt + 1 >= self._max_attempts
                if is_last or not self._is_retryable(e):
                    raise

                if isinstance(e, RateLimitError) and e.retry_after_seconds:
                    wait_time = e.retry_after_seconds
                else:
                    wait_time = self._retry_backoff_base ** attempt

                logger.warning(
                    f"[{partition_id}] {e.message}, retrying in {wait_time}s "
                    f"(attempt {attempt + 1}/{self._max_attempts})"
                )
                await asyncio.sleep(wait_time)

        # range() is never empty, max_attempts >= 1
        raise PartitionFetchError("No attempts made", partition_id=partition_id)

    @staticmethod
    def _is_retryable(error: PartitionFetchError) -> bool:
        if isinstance(error, PartitionDecodeError):
            return False
        if error.is_rate_limited() or error.is_server_error():
            return True
        # Connection errors and timeouts carry no status
        return error.status_code is None

    async def fetch_raw(
        self,
        partition_id: str,
        params: dict[str, str],
    ) -> list[dict[str, Any]]:
        """
        Issue one request and decode the row array.

        Raises:
            RateLimitError: On HTTP 429
            PartitionFetchError: On any other non-2xx status or transport error
            PartitionDecodeError: If the body is not a JSON array of objects
        """
        url = self.partition_url(partition_id)
        session = await self._get_session()

        start_time = time.time()
        try:
            async with session.request(
                "GET",
                url,
                params=params,
                headers=self._get_request_headers(),
            ) as response:
                latency_ms = (time.time() - start_time) * 1000

                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        partition_id=partition_id,
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else None,
                        request_url=url,
                    )

                if not 200 <= response.status < 300:
                    body = await response.text()
                    raise PartitionFetchError(
                        message=f"HTTP {response.status}",
                        partition_id=partition_id,
                        status_code=response.status,
                        response_body=body[:1000],
                        request_url=url,
                    )

                try:
                    payload = await response.json(content_type=None)
                except ValueError as e:
                    raise PartitionDecodeError(
                        message="Response body is not valid JSON",
                        partition_id=partition_id,
                        status_code=response.status,
                        request_url=url,
                        original_error=e,
                    )

                logger.debug(f"[{partition_id}] Request completed in {latency_ms:.1f}ms")

        except aiohttp.ClientError as e:
            raise PartitionFetchError(
                message=f"Connection error: {e}",
                partition_id=partition_id,
                request_url=url,
                original_error=e,
            )
        except asyncio.TimeoutError as e:
            raise PartitionFetchError(
                message=f"Timed out after {self._timeout}s",
                partition_id=partition_id,
                request_url=url,
                original_error=e,
            )

        return self._decode_rows(payload, partition_id, url)

    @staticmethod
    def _decode_rows(
        payload: Any,
        partition_id: str,
        url: str,
    ) -> list[dict[str, Any]]:
        if not isinstance(payload, list):
            raise PartitionDecodeError(
                message=f"Expected JSON array, got {type(payload).__name__}",
                partition_id=partition_id,
                request_url=url,
            )

        for index, row in enumerate(payload):
            if not isinstance(row, dict):
                raise PartitionDecodeError(
                    message=f"Row {index} is {type(row).__name__}, expected object",
                    partition_id=partition_id,
                    request_url=url,
                )

        return payload

    async def _get_session(self) -> aiohttp.ClientSession:
        """Shared session for all partitions; created on first request."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            )
            self._owns_session = True
        return self._session

    def _get_request_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": "ApplianceEnergyEstimator/1.0",
        }
        if self._app_token:
            headers["X-App-Token"] = self._app_token
        return headers

    async def close(self) -> None:
        """Close the session if this fetcher created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "PartitionFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
