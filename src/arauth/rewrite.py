"""The ``artifactregistry://`` repository rewrite rule.

A repository declaration opts in to Artifact Registry authentication by
using the sentinel scheme ``artifactregistry``::

    artifactregistry://us-maven.pkg.dev/my-project/my-repo

:func:`configure_repository` rewrites such a declaration to
``https://us-maven.pkg.dev/my-project/my-repo`` and, when the declaration
has no explicit credentials, attaches the supplied
:class:`~arauth.models.PasswordCredentials` and declares HTTP Basic
authentication. Everything else is left alone.

Only the host, path and fragment survive the rewrite. Userinfo, port and
the query string are dropped; repository URLs that rely on query
parameters lose them.

This module does no I/O and no logging.
"""

from __future__ import annotations

import enum
from typing import Optional
from urllib.parse import urlsplit

from arauth.exceptions import UrlRewriteError
from arauth.host import ArtifactRepository, UrlArtifactRepository
from arauth.models import AuthenticationScheme, PasswordCredentials

ARTIFACT_REGISTRY_SCHEME = "artifactregistry"
"""Sentinel scheme marking a repository for rewriting (compared case-sensitively)."""

HTTPS_SCHEME = "https"


class RewriteOutcome(str, enum.Enum):
    """What :func:`configure_repository` did to a declaration."""

    IGNORED = "ignored"
    """Not a remote URL-based repository."""

    UNCHANGED = "unchanged"
    """URL-based, but the scheme is not ``artifactregistry``."""

    REWRITTEN = "rewritten"
    """URL rewritten; the existing credentials were kept."""

    AUTHENTICATED = "authenticated"
    """URL rewritten and the supplied credentials attached."""


def has_artifact_registry_scheme(url: Optional[str]) -> bool:
    """Return ``True`` if *url* uses exactly the ``artifactregistry`` scheme."""
    if not url:
        return False
    scheme, sep, _ = url.partition(":")
    return bool(sep) and scheme == ARTIFACT_REGISTRY_SCHEME


def _split_host(netloc: str) -> str:
    """Return the host part of *netloc*, without userinfo or port."""
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host
    return host.partition(":")[0]


def rewrite_url(url: str) -> str:
    """Rebuild an ``artifactregistry://`` URL with the ``https`` scheme.

    Args:
        url: A URL whose scheme is ``artifactregistry``.

    Returns:
        ``https://<host><path>`` followed by ``#<fragment>`` when the
        original URL has a ``#``, even if the fragment is empty.

    Raises:
        UrlRewriteError: If *url* does not use the sentinel scheme, cannot
            be parsed, has no host, or has a relative path.

    Example::

        >>> rewrite_url("artifactregistry://us-maven.pkg.dev/proj/repo")
        'https://us-maven.pkg.dev/proj/repo'
    """
    if not has_artifact_registry_scheme(url):
        raise UrlRewriteError(url, f"scheme is not '{ARTIFACT_REGISTRY_SCHEME}'")

    try:
        parts = urlsplit(url)
    except ValueError as exc:
        raise UrlRewriteError(url, str(exc)) from exc

    host = _split_host(parts.netloc)
    if not host:
        raise UrlRewriteError(url, "missing host")
    if parts.path and not parts.path.startswith("/"):
        raise UrlRewriteError(url, "relative path in absolute URL")

    rewritten = f"{HTTPS_SCHEME}://{host}{parts.path}"
    if "#" in url:
        rewritten = f"{rewritten}#{parts.fragment}"
    return rewritten


def configure_repository(
    repository: ArtifactRepository, credentials: PasswordCredentials
) -> RewriteOutcome:
    """Rewrite *repository* in place if it points at Artifact Registry.

    Credentials configured on the repository always win: *credentials* is
    only attached when the repository has none.

    Args:
        repository: Any repository declaration held by the build.
        credentials: The pair to attach to matching repositories.

    Returns:
        The :class:`RewriteOutcome` describing what changed.

    Raises:
        UrlRewriteError: If the URL matches the sentinel scheme but cannot
            be rebuilt. The repository is left untouched.
    """
    if not isinstance(repository, UrlArtifactRepository):
        return RewriteOutcome.IGNORED

    url = repository.url
    if not has_artifact_registry_scheme(url):
        return RewriteOutcome.UNCHANGED

    repository.url = rewrite_url(url)

    if repository.credentials is not None:
        return RewriteOutcome.REWRITTEN

    repository.credentials = credentials
    repository.add_authentication(AuthenticationScheme.BASIC)
    return RewriteOutcome.AUTHENTICATED
