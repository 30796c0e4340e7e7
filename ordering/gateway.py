"""
Submission gateway: one persistence contract, two interchangeable backends.

  RemoteGateway         POST/GET against <base>/sales or <base>/purchases
  LocalFallbackGateway  simulated latency, then append to a JSON array held in
                        injected key-value storage

create_gateway() picks the backend once, from whether a remote API base URL is
configured. A gateway never switches mode afterwards: a failing remote
service is reported as TransportError, it does not fall back to local storage.

All operations are coroutines so callers suspend on the one asynchronous
boundary of the order workflow. Calls are not cancellable once issued.
"""
import asyncio
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .errors import StorageError, TransportError
from .storage import KeyValueStorage, SqliteStorage

logger = logging.getLogger(__name__)

RESOURCES = {"sale": "sales", "purchase": "purchases"}
STORAGE_KEYS = {"sale": "salesRecords", "purchase": "purchaseRecords"}


class SubmissionGateway(ABC):
    """Common contract of both gateway modes."""

    mode: str = ""

    @abstractmethod
    async def submit(self, payload: Dict[str, Any]) -> Any:
        """Persist *payload* and return the backend's result."""

    @abstractmethod
    async def get_by_id(self, record_id: Any) -> Any:
        """Return a single stored order, or None when the local store has no such record."""

    @abstractmethod
    async def list(
        self,
        page: Optional[int] = None,
        size: Optional[int] = None,
        q: Optional[str] = None,
    ) -> Any:
        """Return stored orders."""


class RemoteGateway(SubmissionGateway):
    """
    Forwards payloads verbatim to a remote HTTP API.

    Network failures, timeouts and non-2xx responses raise TransportError with
    the original exception chained. Nothing is retried.
    """

    mode = "remote"

    def __init__(
        self,
        base_url: str,
        resource: str,
        timeout: float = 30,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/{resource}"
        self.timeout = timeout
        self.headers = dict(headers or {})

    def _request(self, method: str, url: str, body: Optional[Dict[str, Any]] = None) -> Any:
        data = json.dumps(body).encode("utf-8") if body is not None else None
        req = urllib.request.Request(url, data=data, method=method)
        req.add_header("Accept", "application/json")
        req.add_header("User-Agent", "Order-Desk/1.0")
        if data is not None:
            req.add_header("Content-Type", "application/json; charset=utf-8")
        for k, v in self.headers.items():
            req.add_header(k, str(v))

        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                status_code = response.getcode()
                resp_body = response.read().decode("utf-8", errors="replace")
        except urllib.error.HTTPError as e:
            resp_body = e.read().decode("utf-8", errors="replace") if e.fp else str(e)
            logger.error("%s %s failed: HTTP %d - %s", method, url, e.code, resp_body[:200])
            raise TransportError(
                f"{method} {url} failed: HTTP {e.code}",
                status_code=e.code,
                response_excerpt=resp_body[:500],
            ) from e
        except (urllib.error.URLError, OSError) as e:
            reason = getattr(e, "reason", e)
            logger.error("%s %s failed: %s", method, url, reason)
            raise TransportError(f"{method} {url} failed: {reason}") from e

        logger.debug("%s %s: HTTP %d", method, url, status_code)
        if not resp_body.strip():
            return None
        try:
            return json.loads(resp_body)
        except json.JSONDecodeError:
            # Response bodies are opaque to the order engine
            return resp_body

    async def submit(self, payload: Dict[str, Any]) -> Any:
        result = await asyncio.to_thread(self._request, "POST", self.url, payload)
        logger.info("Order submitted to %s", self.url)
        return result

    async def get_by_id(self, record_id: Any) -> Any:
        url = f"{self.url}/{urllib.parse.quote(str(record_id), safe='')}"
        return await asyncio.to_thread(self._request, "GET", url)

    async def list(
        self,
        page: Optional[int] = None,
        size: Optional[int] = None,
        q: Optional[str] = None,
    ) -> Any:
        params = {k: v for k, v in (("page", page), ("size", size), ("q", q)) if v is not None}
        url = f"{self.url}?{urllib.parse.urlencode(params)}" if params else self.url
        return await asyncio.to_thread(self._request, "GET", url)


class LocalFallbackGateway(SubmissionGateway):
    """
    Persists orders into local key-value storage as one JSON array.

    submit() waits latency_seconds first so callers see the same asynchronous
    shape as the remote mode. The array is read-modify-written in a single
    step; two writers sharing one store can lose an update.
    """

    mode = "local"

    def __init__(
        self,
        storage: KeyValueStorage,
        storage_key: str,
        latency_seconds: float = 0.4,
    ) -> None:
        self.storage = storage
        self.storage_key = storage_key
        self.latency_seconds = latency_seconds

    def _load(self) -> List[Any]:
        raw = self.storage.get(self.storage_key)
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed data under storage key '%s'", self.storage_key)
            return []
        if not isinstance(records, list):
            logger.warning("Ignoring non-list data under storage key '%s'", self.storage_key)
            return []
        return records

    async def submit(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        await asyncio.sleep(self.latency_seconds)
        try:
            records = self._load()
            records.append(payload)
            self.storage.set(self.storage_key, json.dumps(records, ensure_ascii=False))
        except StorageError as exc:
            logger.error("Local save failed for '%s': %s", self.storage_key, exc)
            raise
        logger.info("Order saved locally under '%s' (%d records)", self.storage_key, len(records))
        return {"ok": True, "source": "local_storage", "data": payload}

    async def get_by_id(self, record_id: Any) -> Any:
        """Look up a record by its 1-based position in the stored sequence."""
        try:
            position = float(record_id)
        except (TypeError, ValueError):
            return None
        records = self._load()
        if not position.is_integer() or not 1 <= position <= len(records):
            return None
        return records[int(position) - 1]

    async def list(
        self,
        page: Optional[int] = None,
        size: Optional[int] = None,
        q: Optional[str] = None,
    ) -> List[Any]:
        # Paging and search are remote-only features; the local store returns everything
        return self._load()

    def clear(self) -> None:
        """Remove every locally stored order for this gateway's key."""
        self.storage.remove(self.storage_key)
        logger.info("Cleared local records under '%s'", self.storage_key)


def create_gateway(
    config: Any,
    direction: str,
    storage: Optional[KeyValueStorage] = None,
) -> SubmissionGateway:
    """
    Build the gateway for *direction* ("sale" or "purchase").

    Remote mode when config.api_base_url is set, local fallback otherwise.
    """
    if config.api_base_url:
        headers = {}
        if config.api_headers_json:
            try:
                headers = json.loads(config.api_headers_json)
            except json.JSONDecodeError as e:
                logger.warning("Failed to parse ORDERS_API_HEADERS: %s", e)
        logger.debug("Using remote gateway at %s", config.api_base_url)
        return RemoteGateway(
            config.api_base_url,
            RESOURCES[direction],
            timeout=config.request_timeout_seconds,
            headers=headers,
        )

    if storage is None:
        storage = SqliteStorage(config.storage_path)
    latency = (
        config.sales_latency_seconds if direction == "sale"
        else config.purchase_latency_seconds
    )
    logger.debug("Using local fallback gateway (%s)", STORAGE_KEYS[direction])
    return LocalFallbackGateway(storage, STORAGE_KEYS[direction], latency_seconds=latency)
