from __future__ import annotations

from http import HTTPStatus
from http.client import HTTPException, InvalidURL
import logging
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from goget_tool.domain.errors import DiscoveryError
from goget_tool.domain.ports import PageFetcherPort


class UrllibPageFetcher(PageFetcherPort):
    def __init__(
        self,
        *,
        timeout_seconds: float = 10.0,
        user_agent: str = "goget/1.0",
        urlopen_fn: Callable[..., Any] = urlopen,
    ) -> None:
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._urlopen_fn = urlopen_fn
        self._logger = logging.getLogger(__name__)

    def fetch_text(self, url: str) -> str:
        self._logger.info("fetching discovery page", extra={"event": "http.fetch.start", "url": url})
        try:
            request = Request(url, headers={"User-Agent": self._user_agent, "Accept": "text/html"})
            with self._urlopen_fn(request, timeout=self._timeout_seconds) as response:
                status = getattr(response, "status", HTTPStatus.OK)
                if status != HTTPStatus.OK:
                    raise DiscoveryError(f"got status {status} from {url}")
                content = response.read()
        except HTTPError as error:
            raise DiscoveryError(f"got status {error.code} from {url}") from error
        except URLError as error:
            raise DiscoveryError(f"failed to fetch {url}: {error.reason}") from error
        except OSError as error:
            raise DiscoveryError(f"failed to fetch {url}: {error}") from error
        except (InvalidURL, ValueError) as error:
            # Unparseable URLs, e.g. a non-numeric port in the host segment.
            raise DiscoveryError(f"invalid discovery URL {url}: {error}") from error
        except HTTPException as error:
            # Truncated bodies and malformed status lines.
            raise DiscoveryError(f"failed to read response from {url}: {error!r}") from error

        if isinstance(content, bytes):
            return content.decode("utf-8", errors="replace")
        return str(content)
