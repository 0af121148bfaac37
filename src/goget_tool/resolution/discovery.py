from __future__ import annotations
"""Live `?go-get=1` discovery of repository locations for vanity import paths.

A host serving a vanity import path answers
`https://<import path>?go-get=1` with markup containing a tag such as:

    <meta name="go-import" content="example.com/pkg git https://github.com/org/pkg">

The content holds exactly three whitespace-separated fields: the import-path
prefix the directive covers, the version control system, and the repository
URL. The first directive whose prefix matches the requested import path wins.
"""

import io
from collections import deque
from html.parser import HTMLParser
from typing import Iterator, TextIO

from goget_tool.domain.entities import DiscoveryDirective
from goget_tool.domain.errors import DirectiveNotFoundError
from goget_tool.domain.ports import PageFetcherPort


GO_IMPORT_META_NAME = "go-import"
DEFAULT_CHUNK_SIZE = 4096

StartTag = tuple[str, dict[str, str]]


class _StartTagCollector(HTMLParser):
    """Buffer start and self-closing tags until the stream drains them."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.pending: deque[StartTag] = deque()

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.pending.append((tag, {key: value or "" for key, value in attrs}))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self.handle_starttag(tag, attrs)


def iter_start_tags(reader: TextIO, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[StartTag]:
    """Yield `(tag, attributes)` for every opening or self-closing tag.

    The reader is consumed lazily in chunks; stop iterating early and the rest
    of the input is never read. A fresh reader is needed to scan again.
    """
    parser = _StartTagCollector()
    while True:
        chunk = reader.read(chunk_size)
        if chunk:
            parser.feed(chunk)
        else:
            parser.close()
        while parser.pending:
            yield parser.pending.popleft()
        if not chunk:
            return


def iter_go_import_directives(reader: TextIO) -> Iterator[DiscoveryDirective]:
    """Yield well-formed `go-import` directives in document order."""
    for tag, attrs in iter_start_tags(reader):
        if tag != "meta" or attrs.get("name") != GO_IMPORT_META_NAME:
            continue
        directive = DiscoveryDirective.from_content(attrs.get("content", ""))
        if directive is not None:
            yield directive


def parse_go_import_meta(reader: TextIO, import_path: str) -> DiscoveryDirective:
    """Return the first directive whose prefix matches `import_path`.

    Raises:
        DirectiveNotFoundError: No matching, well-formed directive exists.
    """
    for directive in iter_go_import_directives(reader):
        if directive.matches(import_path):
            return directive
    raise DirectiveNotFoundError(f"no go-import meta tag found for {import_path}")


def discovery_url(import_path: str) -> str:
    return f"https://{import_path}?go-get=1"


class GoImportDiscoveryClient:
    """Resolve an import path to `(vcs, repo_url)` through a page fetcher."""

    def __init__(self, fetcher: PageFetcherPort) -> None:
        self._fetcher = fetcher

    def discover(self, import_path: str) -> tuple[str, str]:
        """Query the host of `import_path` and return `(vcs, repo_url)`.

        Raises:
            DiscoveryError: Transport failure or non-OK status (from the fetcher).
            DirectiveNotFoundError: Body had no matching directive.
        """
        body = self._fetcher.fetch_text(discovery_url(import_path))
        directive = parse_go_import_meta(io.StringIO(body), import_path)
        return directive.vcs, directive.repo_url
