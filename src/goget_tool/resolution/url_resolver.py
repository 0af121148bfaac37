from __future__ import annotations
"""Import path to clone URL resolution.

Resolution order:
1. Live go-import discovery for domains without a known convention.
2. Vendor rules (`VENDOR_RULES`), matched by import-path prefix.
3. Generic fallback: owner/repo for `COMMON_GIT_HOSTS`, full path otherwise.
"""

from dataclasses import dataclass
import logging

from goget_tool.domain.errors import DiscoveryError
from goget_tool.resolution.discovery import GoImportDiscoveryClient


LOGGER = logging.getLogger(__name__)

COMMON_GIT_HOSTS = frozenset({"github.com", "gitlab.com", "bitbucket.org"})

SUPPORTED_VCS = "git"


@dataclass(frozen=True, slots=True)
class VendorRule:
    """Prefix rule mapping `<prefix><repo>[/sub/pkg]` to a fixed URL template.

    `template` receives `{repo}`, the first segment after the prefix.
    """

    prefix: str
    template: str

    @property
    def domain(self) -> str:
        return self.prefix.split("/", 1)[0]

    def applies_to(self, import_path: str) -> bool:
        return import_path.startswith(self.prefix)

    def format(self, import_path: str) -> str:
        remainder = import_path[len(self.prefix):]
        repo = remainder.split("/", 1)[0]
        return self.template.format(repo=repo)


VENDOR_RULES: tuple[VendorRule, ...] = (
    VendorRule(prefix="golang.org/x/", template="https://go.googlesource.com/{repo}"),
    VendorRule(prefix="google.golang.org/", template="https://github.com/googleapis/{repo}"),
    VendorRule(prefix="go.opentelemetry.io/", template="https://github.com/open-telemetry/{repo}"),
)


def should_use_discovery(import_path: str, vendor_rules: tuple[VendorRule, ...] = VENDOR_RULES) -> bool:
    """Return whether `import_path` belongs to a domain without a known rule."""
    domain = import_path.split("/", 1)[0]
    if not domain:
        return False

    if domain in COMMON_GIT_HOSTS:
        return False

    for rule in vendor_rules:
        if domain == rule.domain or import_path.startswith(rule.domain + "/"):
            return False

    return True


def format_clone_url(domain: str, repo: str | None, *, use_https: bool) -> str:
    """Format an SSH-style or HTTPS-style clone URL."""
    if repo is None:
        return f"https://{domain}.git" if use_https else f"git@{domain}.git"
    if use_https:
        return f"https://{domain}/{repo}.git"
    return f"git@{domain}:{repo}.git"


def heuristic_url(import_path: str, use_https: bool, vendor_rules: tuple[VendorRule, ...] = VENDOR_RULES) -> str:
    """Resolve `import_path` with vendor rules and the generic fallback only."""
    for rule in vendor_rules:
        if rule.applies_to(import_path):
            return rule.format(import_path)

    segments = import_path.split("/")
    domain = segments[0]
    if not domain:
        return ""

    # Anything beyond owner/repo on these hosts is a subpackage.
    if domain in COMMON_GIT_HOSTS and len(segments) >= 3:
        return format_clone_url(domain, "/".join(segments[1:3]), use_https=use_https)

    if len(segments) > 1:
        return format_clone_url(domain, "/".join(segments[1:]), use_https=use_https)

    return format_clone_url(domain, None, use_https=use_https)


class RepositoryUrlResolver:
    """Map an import path plus transport preference to a clone URL.

    Discovery failures never fail resolution; they are logged as warnings and
    the heuristics take over.
    """

    def __init__(
        self,
        discovery_client: GoImportDiscoveryClient | None = None,
        *,
        vendor_rules: tuple[VendorRule, ...] = VENDOR_RULES,
    ) -> None:
        self._discovery_client = discovery_client
        self._vendor_rules = vendor_rules

    def resolve(self, import_path: str, use_https: bool) -> str:
        """Return the clone URL for `import_path`, or `""` when none can be built."""
        if self._discovery_client is not None and should_use_discovery(import_path, self._vendor_rules):
            discovered = self._try_discovery(import_path)
            if discovered:
                return discovered

        return heuristic_url(import_path, use_https, self._vendor_rules)

    def _try_discovery(self, import_path: str) -> str | None:
        try:
            vcs, repo_url = self._discovery_client.discover(import_path)
        except DiscoveryError as error:
            LOGGER.warning(
                "go-import discovery failed; falling back to heuristics",
                extra={
                    "event": "resolver.discovery.failed",
                    "import_path": import_path,
                    "error": str(error),
                },
            )
            return None

        if vcs != SUPPORTED_VCS:
            LOGGER.warning(
                "discovered VCS is not supported; falling back to heuristics",
                extra={
                    "event": "resolver.discovery.unsupported_vcs",
                    "import_path": import_path,
                    "vcs": vcs,
                },
            )
            return None

        LOGGER.info(
            "go-import directive discovered",
            extra={"event": "resolver.discovery.success", "import_path": import_path, "repo_url": repo_url},
        )
        return repo_url
