"""
Couchbase REST Connector - cluster management over the HTTP admin API.

Uses httpx for async HTTP on the connector's own event loop thread.
Maps HTTP outcomes onto the management error taxonomy:
404 -> BucketNotFoundError, 400 "already exists" on create -> BucketAlreadyExistsError,
other errors -> TransportError, unreadable bodies -> DecodeError.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from clustermgr.core.base_class.base_connectors import ClusterConnector
from clustermgr.core.exceptions import (
    BucketAlreadyExistsError,
    BucketNotFoundError,
    ClusterManagerError,
    DecodeError,
    TransportError,
)
from clustermgr.core.registry import register_connector
from clustermgr.models.bucket_model import BucketSettings
from clustermgr.models.cluster_model import ClusterInfo
from clustermgr.models.request_model import OperationKind, OperationRequest


@register_connector("couchbase-rest")
class CouchbaseRestConnector(ClusterConnector):
    """Couchbase management REST API wrapper using httpx"""

    POOLS_PATH = "/pools"
    DEFAULT_POOL_PATH = "/pools/default"
    BUCKETS_PATH = "/pools/default/buckets"

    def __init__(
        self,
        host: str = "127.0.0.1",
        username: str = "Administrator",
        password: Optional[str] = None,
        get_logger: Optional[Callable[[], logging.Logger]] = None,
        *,
        port: int = 8091,
        use_ssl: bool = False,
        verify_ssl: bool = True,
        connect_timeout: float = 5.0,
        request_timeout: float = 30.0,
        max_connections: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(name="couchbase-rest")
        self.logger = get_logger() if get_logger else logging.getLogger(__name__)
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.verify_ssl = verify_ssl
        self.connect_timeout = connect_timeout
        self.request_timeout = request_timeout
        self.max_connections = max_connections

        # Injected transport (tests, proxies); None means real network I/O
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        self._handlers = {
            OperationKind.INFO: self._info,
            OperationKind.LIST: self._list_buckets,
            OperationKind.GET: self._get_bucket,
            OperationKind.HAS: self._has_bucket,
            OperationKind.INSERT: self._insert_bucket,
            OperationKind.UPDATE: self._update_bucket,
            OperationKind.REMOVE: self._remove_bucket,
        }

    @property
    def base_url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.host}:{self.port}"

    async def initialize(self) -> None:
        """Initialize async HTTP client"""
        if self._client is not None:
            return
        try:
            limits = httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=max(1, self.max_connections // 2),
            )
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                auth=(self.username, self.password or ""),
                timeout=httpx.Timeout(self.request_timeout, connect=self.connect_timeout),
                verify=self.verify_ssl,
                limits=limits,
                transport=self._transport,
            )
            self._set_health(True)
            self.logger.info(f"Cluster REST client initialized: {self.base_url}")
        except Exception as e:
            self.logger.error(f"Failed to initialize cluster REST client: {e}")
            self._set_health(False)
            raise

    async def shutdown(self) -> None:
        """Shutdown async HTTP client"""
        if self._client:
            try:
                await self._client.aclose()
                self.logger.info("Cluster REST client closed")
            except Exception as e:
                self.logger.error(f"Error closing HTTP client: {e}")
            finally:
                self._client = None
                self._set_health(False)

    async def health_check(self) -> bool:
        """Check that the node answers on its management port"""
        if not self._client:
            return False
        try:
            response = await self._client.get(self.POOLS_PATH)
            healthy = response.status_code == 200
        except httpx.HTTPError as e:
            self.logger.warning(f"Cluster health check failed: {e}")
            healthy = False
        self._set_health(healthy)
        return healthy

    async def execute(self, request: OperationRequest) -> Any:
        """
        Perform one management request.

        Raises:
            BucketNotFoundError: Bucket-targeted request answered with 404
            BucketAlreadyExistsError: Create rejected because the name is taken
            TransportError: Incomplete request, client not initialized, network failure
                or other HTTP error
            DecodeError: Response body could not be decoded
        """
        operation, target = request.kind.value, request.target
        if request.kind.targets_bucket and not target:
            raise TransportError(f"{operation} requires a bucket name", operation=operation)
        if request.kind in (OperationKind.INSERT, OperationKind.UPDATE) and request.settings is None:
            raise TransportError(
                f"{operation} requires bucket settings", operation=operation, target=target
            )
        if self._client is None:
            raise TransportError(
                "cluster REST client not initialized", operation=operation, target=target
            )

        self.logger.debug(f"Executing {operation} (target={target})")
        try:
            return await self._handlers[request.kind](request)
        except (ClusterManagerError, asyncio.CancelledError):
            raise
        except httpx.HTTPError as e:
            self.logger.error(f"Transport error in {operation}: {e}")
            raise TransportError(
                str(e) or type(e).__name__, operation=operation, target=target
            ) from e
        except (ValidationError, ValueError, KeyError, TypeError) as e:
            self.logger.error(f"Could not decode {operation} response: {e}")
            raise DecodeError(
                f"unexpected response shape: {e}", operation=operation, target=target
            ) from e

    # =========================================================================
    # Operation handlers
    # =========================================================================

    async def _info(self, request: OperationRequest) -> ClusterInfo:
        response = await self._send(request, "GET", self.DEFAULT_POOL_PATH)
        return ClusterInfo.from_server(response.json())

    async def _list_buckets(self, request: OperationRequest) -> List[BucketSettings]:
        response = await self._send(request, "GET", self.BUCKETS_PATH)
        payload = response.json()
        if not isinstance(payload, list):
            raise TypeError(f"bucket list must be an array, got {type(payload).__name__}")
        return [BucketSettings.from_server(entry) for entry in payload]

    async def _get_bucket(self, request: OperationRequest) -> BucketSettings:
        response = await self._send(request, "GET", self._bucket_path(request.target))
        return BucketSettings.from_server(response.json())

    async def _has_bucket(self, request: OperationRequest) -> bool:
        await self._send(request, "GET", self._bucket_path(request.target))
        return True

    async def _insert_bucket(self, request: OperationRequest) -> BucketSettings:
        settings = request.settings
        await self._send(request, "POST", self.BUCKETS_PATH, data=settings.to_form())
        self.logger.info(f"Bucket creation accepted: {settings.name}")
        return settings

    async def _update_bucket(self, request: OperationRequest) -> BucketSettings:
        settings = request.settings
        await self._send(
            request, "POST", self._bucket_path(settings.name), data=settings.to_form(update=True)
        )
        self.logger.info(f"Bucket update accepted: {settings.name}")
        return settings

    async def _remove_bucket(self, request: OperationRequest) -> bool:
        await self._send(request, "DELETE", self._bucket_path(request.target))
        self.logger.info(f"Bucket removal accepted: {request.target}")
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _send(
        self,
        request: OperationRequest,
        method: str,
        path: str,
        data: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Send one HTTP request and map error statuses onto the taxonomy"""
        timeout: Any = httpx.USE_CLIENT_DEFAULT
        if request.timeout is not None:
            timeout = request.timeout

        response = await self._client.request(method, path, data=data, timeout=timeout)
        status = response.status_code
        if status < 400:
            return response

        operation, target = request.kind.value, request.target
        if status == 404 and request.kind.targets_bucket:
            raise BucketNotFoundError(
                "bucket does not exist", operation=operation, target=target
            )
        if (
            request.kind is OperationKind.INSERT
            and status == 400
            and "already exists" in response.text.lower()
        ):
            raise BucketAlreadyExistsError(
                "bucket already exists", operation=operation, target=target
            )

        self.logger.error(f"{operation} response status={status} body: {response.text}")
        raise TransportError(
            f"server responded with HTTP {status}",
            status_code=status,
            operation=operation,
            target=target,
            details={"body": response.text[:500]},
        )

    def _bucket_path(self, name: str) -> str:
        return f"{self.BUCKETS_PATH}/{quote(name, safe='')}"
