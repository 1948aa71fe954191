"""Async client for the Firefly inventory API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from ..errors import (
    AuthenticationError,
    TerminalFetchError,
    TransientFetchError,
)
from ..models import FireflyAggregation, FireflyAsset, FireflyAssetFilters, InventoryPage

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class FireflyClient:
    """Fetches inventory assets from Firefly.

    The bearer token is obtained lazily on the first request and cached on
    the instance. A failed inventory request is retried as a request; it
    does not trigger a new login.
    """

    BASE_URL = "https://api.firefly.ai/api/v1.0"
    PAGE_SIZE = 10000
    MAX_ATTEMPTS = 3

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        base_url: str = BASE_URL,
        http_client: httpx.AsyncClient | None = None,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
        page_size: int = PAGE_SIZE,
    ):
        """Initialize the client.

        Args:
            access_key: Firefly access key.
            secret_key: Firefly secret key.
            base_url: API root, without trailing slash.
            http_client: Shared httpx client. Created (and owned) if None.
            retry_delay: Base backoff in seconds; attempt N waits N * retry_delay.
            timeout: Request timeout in seconds for an owned client.
            page_size: Default number of assets requested per page.
        """
        self._access_key = access_key
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._retry_delay = retry_delay
        self._page_size = page_size
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self._access_token: str | None = None

    async def __aenter__(self) -> "FireflyClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http.aclose()

    @property
    def has_token(self) -> bool:
        return bool(self._access_token)

    async def login(self) -> str:
        """Exchange the access and secret keys for a bearer token.

        Raises:
            AuthenticationError: If the login call fails or returns no token.
        """
        try:
            response = await self._http.post(
                f"{self._base_url}/login",
                json={"accessKey": self._access_key, "secretKey": self._secret_key},
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise AuthenticationError(f"Login failed: {status} - {e}", status) from e
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Login failed: {e}") from e
        except ValueError as e:
            raise AuthenticationError(f"Login failed: invalid response body ({e})") from e

        token = data.get("accessToken") if isinstance(data, dict) else None
        if not token:
            raise AuthenticationError("No access token received from login")

        self._access_token = token
        logger.debug("Authenticated with Firefly")
        return token

    async def _request(self, path: str, body: dict[str, Any] | None = None) -> Any:
        """POST an authenticated request and return the decoded JSON body."""
        if not self._access_token:
            await self.login()

        url = f"{self._base_url}{path}"
        try:
            response = await self._http.post(
                url,
                json=body or {},
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                },
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                # Token expired or revoked; log in again on the next request
                self._access_token = None
                raise AuthenticationError(
                    f"Request to {path} rejected: {status}", status
                ) from e
            if status in RETRYABLE_STATUS_CODES:
                raise TransientFetchError(
                    f"Request to {path} failed: {status} - {e}", status
                ) from e
            raise TerminalFetchError(
                f"Request to {path} failed: {status} - {e}", status
            ) from e
        except httpx.TransportError as e:
            raise TransientFetchError(f"Request to {path} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise TerminalFetchError(f"Invalid JSON from {path}: {e}") from e

    async def get_assets(
        self,
        filters: FireflyAssetFilters | None = None,
        size: int | None = None,
        after_key: Any = None,
    ) -> InventoryPage:
        """Fetch a single page of inventory assets.

        Records without a Firefly asset id are dropped here so that
        everything downstream can rely on a stable identity.
        """
        body = filters.to_query() if filters else {}
        if size is not None:
            body["size"] = size
        if after_key is not None:
            body["afterKey"] = after_key

        data = await self._request("/inventory", body)
        if not isinstance(data, dict):
            raise TerminalFetchError("Unexpected inventory response shape")

        raw_objects = data.get("responseObjects") or []
        items: list[FireflyAsset] = []
        for raw in raw_objects:
            try:
                items.append(FireflyAsset.model_validate(raw))
            except ValidationError as e:
                logger.warning(f"Skipping invalid inventory record: {e.error_count()} error(s)")

        return InventoryPage(
            items=items,
            total_count=data.get("totalObjects") or 0,
            after_key=data.get("afterKey"),
            fetched_count=len(raw_objects),
        )

    async def get_all_assets(
        self,
        filters: FireflyAssetFilters | None = None,
        page_size: int | None = None,
    ) -> list[FireflyAsset]:
        """Fetch every asset matching the filters, following afterKey cursors.

        Each page is attempted up to MAX_ATTEMPTS times on transient errors.

        Raises:
            AuthenticationError: If login fails or the token is rejected.
            TerminalFetchError: If a page cannot be fetched.
        """
        page_size = page_size or self._page_size
        logger.info("Getting all assets")
        assets: list[FireflyAsset] = []
        after_key: Any = None
        page_number = 1

        while True:
            page = await self._get_page_with_retry(filters, page_size, after_key)
            logger.info(
                f"Found {page.fetched_count} assets on page {page_number}, "
                f"total objects: {page.total_count}"
            )
            assets.extend(page.items)

            if page.fetched_count < page_size:
                break
            if page.after_key is None:
                logger.warning(f"Page {page_number} was full but returned no afterKey")
                break
            after_key = page.after_key
            page_number += 1

        return assets

    async def _get_page_with_retry(
        self,
        filters: FireflyAssetFilters | None,
        page_size: int,
        after_key: Any,
    ) -> InventoryPage:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.MAX_ATTEMPTS),
            wait=wait_incrementing(start=self._retry_delay, increment=self._retry_delay),
            retry=retry_if_exception_type(TransientFetchError),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self.get_assets(filters, size=page_size, after_key=after_key)
        except TransientFetchError as e:
            raise TerminalFetchError(
                f"Failed to get assets after {self.MAX_ATTEMPTS} attempts: {e}",
                e.status_code,
            ) from e
        raise TerminalFetchError("Failed to get assets")

    async def get_aggregations(
        self, filters: FireflyAssetFilters | None = None
    ) -> list[FireflyAggregation]:
        """Fetch inventory aggregations for the given filters."""
        body = filters.to_query() if filters else {}
        data = await self._request("/inventory/aggregations", body)
        if not isinstance(data, list):
            raise TerminalFetchError("Unexpected aggregations response shape")
        return [FireflyAggregation.model_validate(item) for item in data]
