from __future__ import annotations
"""Error taxonomy shared by resolution, fetch pipeline and CLI layers."""


class ImportPathError(ValueError):
    """Raised when a raw argument cannot be turned into a fetchable import path."""


class GogetError(RuntimeError):
    """Base class for runtime failures of a single fetch attempt."""


class DestinationError(GogetError):
    """Destination path cannot be computed or lies outside `<root>/src`."""


class DiscoveryError(GogetError):
    """`?go-get=1` lookup failed at the transport or HTTP status level."""


class DirectiveNotFoundError(DiscoveryError):
    """Markup was read to the end without a matching `go-import` directive."""


class CloneError(GogetError):
    """External git clone could not be started or exited unsuccessfully."""

    def __init__(self, message: str, *, command: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.command = command
