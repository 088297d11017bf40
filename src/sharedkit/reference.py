"""Parsing of repository references such as ``owner/name#branch``."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlsplit

from .core.errors import AmbiguousVersionSelector, MalformedReference, UnsupportedHost

__all__ = [
    "RepositoryHost",
    "RepositoryReference",
    "SelectorKind",
    "VersionSelector",
    "parse_reference",
]


_COMMIT_PATTERN = re.compile(r"[0-9a-fA-F]{7,40}")
_SHORTHAND_PATTERN = re.compile(r"(?P<owner>[^/\s#@]+)/(?P<name>[^/\s#@]+)")


class RepositoryHost(str, Enum):
    """Hosting platforms a reference may point at."""

    GITHUB = "github"
    GITLAB = "gitlab"

    @property
    def domain(self) -> str:
        return f"{self.value}.com"


class SelectorKind(str, Enum):
    BRANCH = "branch"
    TAG = "tag"
    COMMIT = "commit"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class VersionSelector:
    """Which revision of a repository to use."""

    kind: SelectorKind = SelectorKind.DEFAULT
    value: str | None = None

    @classmethod
    def from_token(cls, token: str) -> "VersionSelector":
        """Classify an ``@token`` suffix as a commit hash or a tag name."""

        if _COMMIT_PATTERN.fullmatch(token):
            return cls(SelectorKind.COMMIT, token)
        return cls(SelectorKind.TAG, token)

    def __str__(self) -> str:
        if self.kind is SelectorKind.DEFAULT:
            return "default branch"
        return f"{self.kind.value} {self.value}"


@dataclass(frozen=True, slots=True)
class RepositoryReference:
    """Structured form of a repository reference string."""

    host: RepositoryHost
    owner: str
    name: str
    selector: VersionSelector = VersionSelector()

    @property
    def url(self) -> str:
        return f"https://{self.host.domain}/{self.owner}/{self.name}"

    def __str__(self) -> str:
        if self.selector.kind is SelectorKind.DEFAULT:
            return self.url
        marker = "#" if self.selector.kind is SelectorKind.BRANCH else "@"
        return f"{self.url}{marker}{self.selector.value}"


def _split_selector(raw: str) -> tuple[str, VersionSelector]:
    has_branch = "#" in raw
    has_revision = "@" in raw
    if has_branch and has_revision:
        raise AmbiguousVersionSelector(
            f"reference '{raw}' specifies both a '#branch' and an '@tag-or-commit' selector"
        )

    if has_branch:
        base, _, token = raw.partition("#")
        if not token:
            raise MalformedReference(f"reference '{raw}' has an empty branch selector")
        return base, VersionSelector(SelectorKind.BRANCH, token)

    if has_revision:
        base, _, token = raw.partition("@")
        if not token:
            raise MalformedReference(f"reference '{raw}' has an empty tag or commit selector")
        return base, VersionSelector.from_token(token)

    return raw, VersionSelector()


def _host_from_netloc(netloc: str, raw: str) -> RepositoryHost:
    hostname = netloc.lower()
    if hostname.startswith("www."):
        hostname = hostname[4:]
    for host in RepositoryHost:
        if hostname == host.domain:
            return host
    raise UnsupportedHost(f"host '{netloc}' in '{raw}' is neither github.com nor gitlab.com")


def _strip_git_suffix(name: str) -> str:
    return name[: -len(".git")] if name.endswith(".git") else name


def parse_reference(raw: str) -> RepositoryReference:
    """Parse ``raw`` into a :class:`RepositoryReference`.

    Two forms are accepted, both optionally suffixed with ``#<branch>`` or
    ``@<tag-or-commit>``:

    * a full URL, ``https://<host>/<owner>/<name>`` where host is GitHub or GitLab
    * the shorthand ``<owner>/<name>`` which always refers to GitHub

    An ``@`` token made of 7 to 40 hexadecimal characters is treated as a commit
    hash, anything else as a tag.
    """

    text = raw.strip()
    base, selector = _split_selector(text)

    if base.startswith(("http://", "https://")):
        parts = urlsplit(base)
        if not parts.netloc:
            raise MalformedReference(f"reference '{raw}' has no host")
        host = _host_from_netloc(parts.netloc, raw)
        segments = [segment for segment in parts.path.split("/") if segment]
        if len(segments) < 2:
            raise MalformedReference(f"URL '{raw}' must contain an owner and a repository name")
        owner, name = segments[0], _strip_git_suffix(segments[1])
    else:
        match = _SHORTHAND_PATTERN.fullmatch(base)
        if match is None:
            raise MalformedReference(
                f"reference '{raw}' is neither a repository URL nor an 'owner/name' shorthand"
            )
        host = RepositoryHost.GITHUB
        owner, name = match["owner"], _strip_git_suffix(match["name"])

    if not owner or not name:
        raise MalformedReference(f"could not extract owner and name from '{raw}'")

    return RepositoryReference(host=host, owner=owner, name=name, selector=selector)
