"""Remote collaborators: the dev.to read API and the mutation sink.

DevToFetcher maps the public dev.to articles API onto Records. The list
endpoint carries no body, so list records have body=None until a detail
fetch fills it in.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from postsync.config import DEFAULT_API_BASE_URL
from postsync.protocols import NetworkError, NotFoundError
from postsync.types import MutationIntent, Record

logger = logging.getLogger(__name__)


def record_from_article(article: Dict[str, Any], include_body: bool = False) -> Record:
    """Convert a dev.to article payload into a Record."""
    if article.get("id") is None:
        raise NetworkError("Remote article is missing an id")
    user = article.get("user") or {}
    return Record(
        id=str(article["id"]),
        title=article.get("title") or "",
        summary=article.get("description") or "",
        body=article.get("body_markdown") if include_body else None,
        author_name=user.get("name") or "",
        date=article.get("published_at"),
        is_local=False,
    )


class DevToFetcher:
    """RemoteSnapshotFetcher for the dev.to articles API.

    Args:
        base_url: API root, e.g. https://dev.to/api.
        per_page: Page size requested from the list endpoint.
        timeout: Request timeout in seconds.
        client: Optional httpx.AsyncClient; one is created per call otherwise.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE_URL,
        per_page: int = 100,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.timeout = timeout
        self._client = client

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(path.rsplit("/", 1)[-1], where="remote source")
        if response.status_code != 200:
            raise NetworkError(f"{url} returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f"Invalid JSON from {url}: {e}") from e

    async def fetch_list(self) -> List[Record]:
        data = await self._get_json("/articles", params={"per_page": self.per_page})
        if not isinstance(data, list):
            raise NetworkError("Article list response is not a list")
        records = []
        for item in data:
            if not isinstance(item, dict) or item.get("id") is None:
                logger.debug(f"Skipping malformed article in list response: {item!r:.80}")
                continue
            records.append(record_from_article(item))
        logger.debug(f"Fetched {len(records)} remote records")
        return records

    async def fetch_one(self, record_id: str) -> Record:
        data = await self._get_json(f"/articles/{record_id}")
        if not isinstance(data, dict):
            raise NetworkError(f"Article {record_id} response is not an object")
        return record_from_article(data, include_body=True)


class SimulatedMutationSink:
    """MutationSink that accepts every intent without any network call.

    The remote API is read-only; replayed mutations are acknowledged
    locally. Submitted intents are kept for inspection.
    """

    def __init__(self):
        self.submitted: List[MutationIntent] = []

    async def submit(self, intent: MutationIntent) -> None:
        logger.debug(f"[simulated] submitting {intent.kind.value} {intent.record_id}")
        self.submitted.append(intent)
