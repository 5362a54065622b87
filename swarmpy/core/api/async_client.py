"""
Async Bee API client.

Issues the remote operations the upload engine needs against one local
Bee node: tag creation, tag status, tag listing and payload upload.
"""
import json
import time
import asyncio
from typing import Dict, Optional, Any, List
from urllib.parse import quote
import aiohttp

from .config import APIConfig
from ..exceptions import UnreachableError, RemoteError, PreconditionFailedError
from ..logging import get_logger
from ..upload.models import TransferStatus


# Bee request headers
POSTAGE_BATCH_HEADER = 'swarm-postage-batch-id'
TAG_HEADER = 'swarm-tag'
COLLECTION_HEADER = 'swarm-collection'
INDEX_DOCUMENT_HEADER = 'swarm-index-document'

OCTET_STREAM = 'application/octet-stream'
TAR = 'application/x-tar'


class AsyncAPIClient:
    """
    Asynchronous Bee API client.

    Features:
    - One pooled aiohttp session per client
    - Connection failures surface as UnreachableError
    - Non-2xx answers surface as RemoteError
    - No automatic retries

    Example:
        >>> async with AsyncAPIClient() as client:
        ...     uid = await client.create_transfer()
        ...     status = await client.fetch_status(uid)
    """

    def __init__(self, config: Optional[APIConfig] = None):
        """
        Initialize async API client.

        Args:
            config: API configuration (uses defaults if not provided)
        """
        self._config = config or APIConfig.default()
        self._session: Optional[aiohttp.ClientSession] = None
        self._connector: Optional[aiohttp.TCPConnector] = None
        self._closed = False

        self._logger = get_logger('swarmpy.api')

    @property
    def config(self) -> APIConfig:
        """Get current configuration."""
        return self._config

    async def __aenter__(self) -> 'AsyncAPIClient':
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure session is created and open."""
        if self._session is None or self._session.closed:
            self._connector = aiohttp.TCPConnector(
                **self._config.get_connector_kwargs()
            )
            self._session = aiohttp.ClientSession(
                connector=self._connector,
                **self._config.get_session_kwargs()
            )
            self._closed = False
        return self._session

    async def close(self):
        """Close client and release resources."""
        self._closed = True

        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._connector = None

    def _build_url(self, path: str) -> str:
        """Build request URL."""
        return f"{self._config.base_url}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        data: Optional[bytes] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None
    ) -> Dict[str, Any]:
        """
        Make a request and decode the JSON body.

        Args:
            method: HTTP method
            path: Path including query string
            data: Optional request body
            headers: Optional extra headers
            timeout: Optional per-request timeout

        Returns:
            Decoded JSON object, or {'raw': text} for non-JSON bodies

        Raises:
            UnreachableError: If the node cannot be reached
            RemoteError: If the node answers with a non-2xx status
        """
        session = await self._ensure_session()
        url = self._build_url(path)
        kwargs: Dict[str, Any] = {}
        if data is not None:
            kwargs['data'] = data
        if headers:
            kwargs['headers'] = headers
        if timeout is not None:
            kwargs['timeout'] = timeout

        self._logger.debug(f"{method} {url}")

        try:
            async with session.request(method, url, **kwargs) as response:
                response_text = await response.text()
                if not 200 <= response.status < 300:
                    self._logger.debug(f"{method} {url} -> HTTP {response.status}: {response_text[:300]}")
                    raise RemoteError(response.status, response_text.strip())
        except aiohttp.ClientConnectionError as e:
            self._logger.debug(f"Bee node unreachable at {self._config.base_url}: {e}")
            raise UnreachableError(f"Bee node unreachable at {self._config.base_url}: {e}") from e
        except asyncio.TimeoutError as e:
            raise UnreachableError(f"Bee node at {self._config.base_url} timed out") from e
        except aiohttp.ClientError as e:
            raise UnreachableError(f"Bee node at {self._config.base_url} failed mid-request: {e}") from e

        return self._parse_response(response_text)

    def _parse_response(self, response_text: str) -> Dict[str, Any]:
        """Decode a response body."""
        try:
            result = json.loads(response_text)
        except ValueError:
            return {'raw': response_text.strip()}
        if not isinstance(result, dict):
            return {'raw': result}
        return result

    @staticmethod
    def _parse_status(data: Any) -> TransferStatus:
        """Parse a tag object, rejecting malformed counters."""
        try:
            return TransferStatus.from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise RemoteError(200, f"Malformed tag object {data!r}: {e}") from e

    async def create_transfer(self) -> int:
        """
        Create a new tag.

        Returns:
            Tag uid (the transfer handle)

        Raises:
            UnreachableError: If the node cannot be reached
            RemoteError: If the node rejects the request
        """
        result = await self._request(
            'POST', '/tags',
            headers={'Content-Type': 'application/json'}
        )
        if 'uid' not in result:
            raise RemoteError(200, f"Tag response without uid: {result}")
        uid = int(result['uid'])
        self._logger.info(f"Created tag {uid}")
        return uid

    async def fetch_status(self, uid: int) -> TransferStatus:
        """
        Fetch the propagation counters of a tag.

        Args:
            uid: Tag uid

        Returns:
            Current TransferStatus
        """
        result = await self._request('GET', f"/tags/{uid}")
        result.setdefault('uid', uid)
        return self._parse_status(result)

    async def list_transfers(self, page_size: Optional[int] = None) -> List[TransferStatus]:
        """
        List every tag known to the node.

        Pages through GET /tags until a short page is returned.

        Args:
            page_size: Tags per request (defaults to config.list_page_size)

        Returns:
            All tags in the order the node returned them
        """
        limit = page_size or self._config.list_page_size
        offset = 0
        tags: List[TransferStatus] = []

        while True:
            result = await self._request('GET', f"/tags?limit={limit}&offset={offset}")
            page = result.get('tags') or []
            tags.extend(self._parse_status(tag) for tag in page)

            if len(page) < limit:
                break
            offset += limit

        self._logger.debug(f"Listed {len(tags)} tags")
        return tags

    async def upload_payload(
        self,
        data: bytes,
        name: str,
        batch_id: str,
        uid: int,
        is_collection: bool = False,
        entry_point: Optional[str] = None
    ) -> str:
        """
        Upload a file or a tar collection in a single request.

        The request itself reports no progress; poll fetch_status for that.

        Args:
            data: Raw file bytes or tar archive bytes
            name: Name on Swarm
            batch_id: Postage batch id
            uid: Tag uid to account chunks against
            is_collection: True if data is a tar archive
            entry_point: Index document of a collection

        Returns:
            Content address (reference)

        Raises:
            PreconditionFailedError: If the batch id is missing or unusable
            UnreachableError: If the node cannot be reached
            RemoteError: If the node rejects the upload
        """
        if not batch_id or not batch_id.strip():
            raise PreconditionFailedError("Postage batch id is not set")

        headers = {
            'Content-Type': TAR if is_collection else OCTET_STREAM,
            POSTAGE_BATCH_HEADER: batch_id.strip(),
            TAG_HEADER: str(uid),
        }
        if is_collection:
            headers[COLLECTION_HEADER] = 'true'
            if entry_point:
                headers[INDEX_DOCUMENT_HEADER] = entry_point

        size_mb = len(data) / (1024 * 1024)
        self._logger.info(f"Uploading {name} ({size_mb:.2f} MB) under tag {uid}")
        upload_start = time.time()

        try:
            result = await self._request(
                'POST', f"/bzz?name={quote(name, safe='')}",
                data=data,
                headers=headers,
                timeout=self._config.timeout.to_upload_timeout()
            )
        except RemoteError as e:
            if self._is_batch_rejection(e):
                raise PreconditionFailedError(
                    f"Postage batch rejected: {e.body or e.status}", error_code=e.status
                ) from e
            raise

        reference = result.get('reference')
        if not reference:
            raise RemoteError(200, f"Upload response without reference: {result}")

        upload_time = time.time() - upload_start
        self._logger.info(f"Uploaded {name} in {upload_time:.2f}s: {reference}")
        return reference

    @staticmethod
    def _is_batch_rejection(error: RemoteError) -> bool:
        """Payment required, or a 400/404 complaining about the batch."""
        if error.status == 402:
            return True
        return error.status in (400, 404) and 'batch' in error.body.lower()
