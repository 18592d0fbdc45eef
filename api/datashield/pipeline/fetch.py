import logging
from dataclasses import dataclass

import httpx

from ..errors import FetchFailed

logger = logging.getLogger(__name__)

USER_AGENT = "DataShieldAnalyzer/1.0 (+url risk analysis)"
FETCH_TIMEOUT_S = 5.0
MAX_REDIRECTS = 5
# Only the first part of a page reaches the prompt anyway.
MAX_BODY_BYTES = 1_000_000


@dataclass(frozen=True)
class FetchedPage:
    url: str
    body: str
    status_code: int
    final_url: str
    truncated: bool = False


class ContentFetcher:
    """
    Single-shot page fetcher for the URL route.

    One GET per call, bounded by a timeout and a redirect limit. Any transport
    problem is terminal for the request; there is no retry.
    """

    def __init__(
        self,
        *,
        timeout: float = FETCH_TIMEOUT_S,
        max_redirects: int = MAX_REDIRECTS,
        max_bytes: int = MAX_BODY_BYTES,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.max_bytes = max_bytes
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            max_redirects=max_redirects,
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    def _read_capped(self, response: httpx.Response) -> tuple[bytes, bool]:
        chunks: list[bytes] = []
        size = 0
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            size += len(chunk)
            if size > self.max_bytes:
                return b"".join(chunks)[: self.max_bytes], True
        return b"".join(chunks), False

    def fetch(self, url: str) -> FetchedPage:
        try:
            with self._client.stream("GET", url) as response:
                raw, truncated = self._read_capped(response)
                encoding = response.encoding or "utf-8"
                status_code = response.status_code
                final_url = str(response.url)
        except httpx.TooManyRedirects as exc:
            raise FetchFailed(f"Too many redirects while fetching {url}", cause=exc) from exc
        except httpx.TimeoutException as exc:
            raise FetchFailed(f"Timed out fetching {url}", cause=exc) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchFailed(f"Could not fetch {url}: {exc}", cause=exc) from exc

        # Error statuses still carry a page worth classifying.
        if status_code >= 400:
            logger.info(f"Fetched {url} with status {status_code}")
        if truncated:
            logger.info(f"Body of {url} cut at {self.max_bytes} bytes")
        try:
            body = raw.decode(encoding, errors="replace")
        except LookupError:
            body = raw.decode("utf-8", errors="replace")
        return FetchedPage(
            url=url,
            body=body,
            status_code=status_code,
            final_url=final_url,
            truncated=truncated,
        )

    def close(self) -> None:
        self._client.close()
