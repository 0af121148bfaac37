"""Import path resolution: vendor rules, heuristics and go-import discovery."""

from .discovery import GoImportDiscoveryClient, iter_start_tags, parse_go_import_meta
from .url_resolver import COMMON_GIT_HOSTS, VENDOR_RULES, RepositoryUrlResolver, VendorRule, should_use_discovery

__all__ = [
	"COMMON_GIT_HOSTS",
	"VENDOR_RULES",
	"GoImportDiscoveryClient",
	"RepositoryUrlResolver",
	"VendorRule",
	"iter_start_tags",
	"parse_go_import_meta",
	"should_use_discovery",
]
