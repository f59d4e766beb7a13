"""Download link resolver - maps a declaration to an artifact URL."""

import hashlib
import logging
import posixpath
from typing import Callable, Optional
from urllib.parse import SplitResult, quote, urlencode, urlsplit

from wpdi.installer.collaborators import DirectoryLookup, TransientCache
from wpdi.installer.errors import ResolutionError
from wpdi.installer.manifest import DependencyDeclaration, Host
from wpdi.installer.registry import DependencyRegistry

logger = logging.getLogger(__name__)

WORDPRESS_DOWNLOADS = "https://downloads.wordpress.org/plugin/{slug}.zip"
DOWNLOAD_LINK_TTL = 24 * 60 * 60

DownloadLinkFilter = Callable[[Optional[str], DependencyDeclaration], Optional[str]]


def _with_query(url: str, **params: Optional[str]) -> str:
    """Append the non-empty params to a URL that has no query yet."""
    present = {k: v for k, v in params.items() if v}
    if not present:
        return url
    return f"{url}?{urlencode(present)}"


def _owner_repo(path: str) -> str:
    owner_repo = path.strip("/")
    if owner_repo.endswith(".git"):
        owner_repo = owner_repo[: -len(".git")]
    return owner_repo


def _split_uri(uri: str) -> SplitResult:
    try:
        return urlsplit(uri)
    except ValueError as e:
        raise ResolutionError(f"Malformed URI {uri}: {e}") from e


def wordpress_slug(declaration: DependencyDeclaration) -> str:
    """Plugin directory slug on wordpress.org, taken from the URI or the slug."""
    try:
        owner_repo = _owner_repo(_split_uri(declaration.uri).path)
    except ResolutionError:
        return declaration.directory
    return posixpath.basename(owner_repo) or declaration.directory


def build_download_link(declaration: DependencyDeclaration) -> str:
    """Build the download link for every host except ``wordpress``.

    Deterministic: the same declaration always yields the same link.

    Raises:
        ResolutionError: If no link can be built from the declaration
    """
    parts = _split_uri(declaration.uri)
    scheme = parts.scheme or "https"
    api = parts.hostname
    owner_repo = _owner_repo(parts.path)
    branch = declaration.branch
    token = declaration.token
    host = declaration.host

    if host == Host.DIRECT:
        if parts.scheme not in ("http", "https", "ftp") or not parts.netloc or any(c.isspace() for c in declaration.uri):
            raise ResolutionError(f"Invalid direct URI: {declaration.uri}")
        return declaration.uri

    if host == Host.WORDPRESS:
        raise ResolutionError("wordpress.org links need a directory lookup")

    if not owner_repo:
        raise ResolutionError(f"Cannot derive owner/repo from {declaration.uri}")

    if host == Host.GITHUB:
        base = "api.github.com" if api in (None, "github.com") else api
        link = f"{scheme}://{base}/repos/{owner_repo}/zipball/{branch}"
        return _with_query(link, access_token=token)

    if host == Host.BITBUCKET:
        base = api or "bitbucket.org"
        return f"{scheme}://{base}/{owner_repo}/get/{branch}.zip"

    if host == Host.GITLAB:
        base = api or "gitlab.com"
        project = quote(owner_repo, safe="")
        link = f"{scheme}://{base}/api/v4/projects/{project}/repository/archive.zip"
        return _with_query(link, sha=branch, private_token=token)

    if host == Host.GITEA:
        if not api:
            raise ResolutionError(f"Gitea URI has no host: {declaration.uri}")
        link = f"{scheme}://{api}/repos/{owner_repo}/archive/{branch}.zip"
        return _with_query(link, access_token=token)

    raise ResolutionError(f"Unsupported host: {host}")


class DownloadLinkResolver:
    """Resolves and caches download links for declarations."""

    def __init__(
        self,
        directory: DirectoryLookup,
        cache: TransientCache,
        link_filter: Optional[DownloadLinkFilter] = None,
    ):
        """
        Args:
            directory: Remote plugin directory, used for the wordpress host only
            cache: Key-value store keeping wordpress.org links for a day
            link_filter: Optional ``(link, declaration) -> link`` post-processor
        """
        self.directory = directory
        self.cache = cache
        self.link_filter = link_filter

    async def resolve_download_link(self, declaration: DependencyDeclaration) -> Optional[str]:
        """Resolve the download link of a declaration.

        Never raises; an unresolvable declaration yields None.
        """
        if declaration.host == Host.WORDPRESS:
            link = await self._resolve_wordpress(declaration)
        else:
            try:
                link = build_download_link(declaration)
            except ResolutionError as e:
                logger.warning(f"[Resolver] {declaration.slug}: {e}")
                link = None

        if self.link_filter is not None:
            link = self.link_filter(link, declaration)
        return link

    async def apply_config(self, registry: DependencyRegistry) -> None:
        """Attach a resolved download link to every registered declaration."""
        for declaration in registry.all():
            declaration.download_link = await self.resolve_download_link(declaration)
            logger.debug(f"[Resolver] {declaration.slug} -> {declaration.download_link}")

    async def _resolve_wordpress(self, declaration: DependencyDeclaration) -> str:
        slug = wordpress_slug(declaration)
        cache_key = "wpdi_download_link_" + hashlib.md5(slug.encode("utf-8")).hexdigest()

        cached = self.cache.get(cache_key)
        if cached:
            logger.debug(f"[Resolver] Cache hit for wordpress.org plugin '{slug}'")
            return cached

        link = None
        try:
            link = await self.directory.fetch_latest_download_link(slug)
        except Exception as e:
            logger.warning(f"[Resolver] wordpress.org lookup for '{slug}' failed: {e}")

        if not link:
            link = WORDPRESS_DOWNLOADS.format(slug=slug)
            logger.info(f"[Resolver] Using fallback download link for '{slug}'")

        self.cache.set(cache_key, link, DOWNLOAD_LINK_TTL)
        return link
