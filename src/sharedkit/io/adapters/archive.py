"""Fetch repository snapshots as zip archives over HTTPS."""

from __future__ import annotations

import logging
import tempfile
import zipfile
from pathlib import Path

import httpx
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)

from ...core.errors import RepositoryResolutionFailed
from ...reference import RepositoryHost, RepositoryReference, SelectorKind
from ..interfaces import RepositoryResolver

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


def archive_url(reference: RepositoryReference) -> str:
    """Download URL of the zip archive for ``reference``."""

    selector = reference.selector
    if reference.host is RepositoryHost.GITHUB:
        base = f"https://github.com/{reference.owner}/{reference.name}/archive"
        if selector.kind is SelectorKind.BRANCH:
            return f"{base}/refs/heads/{selector.value}.zip"
        if selector.kind is SelectorKind.TAG:
            return f"{base}/refs/tags/{selector.value}.zip"
        if selector.kind is SelectorKind.COMMIT:
            return f"{base}/{selector.value}.zip"
        return f"{base}/HEAD.zip"

    ref = selector.value if selector.value is not None else "HEAD"
    return (
        f"https://gitlab.com/{reference.owner}/{reference.name}"
        f"/-/archive/{ref}/{reference.name}-{ref}.zip"
    )


def extract_archive(zip_path: Path, extract_dir: Path) -> Path:
    """Extract ``zip_path`` and return the directory holding the repository files.

    Hosting platforms wrap the snapshot in a single top-level folder; when that
    is the case the folder itself is returned.
    """

    extract_dir.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(zip_path) as archive:
        archive.extractall(extract_dir)

    entries = list(extract_dir.iterdir())
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    return extract_dir


class ArchiveRepositoryResolver(RepositoryResolver):
    """Download and unpack repository archives into temporary directories.

    Extracted trees stay on disk until :meth:`close` is called. With
    ``show_progress`` each download draws a byte bar on ``console``, sized from
    ``Content-Length`` when the server sends one.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        show_progress: bool = False,
        console: Console | None = None,
    ) -> None:
        self._client = client
        self.show_progress = show_progress
        self.console = console
        self._owns_client = client is None
        self._workspaces: list[tempfile.TemporaryDirectory[str]] = []

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(follow_redirects=True, timeout=DEFAULT_TIMEOUT)
        return self._client

    def resolve(self, reference: RepositoryReference) -> Path:
        url = archive_url(reference)
        workspace = tempfile.TemporaryDirectory(prefix="shared-kit-")
        self._workspaces.append(workspace)
        zip_path = Path(workspace.name) / "repo.zip"

        LOGGER.info("Downloading %s", url)
        try:
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                self._save(response, zip_path, reference)
        except httpx.HTTPStatusError as exc:
            raise RepositoryResolutionFailed(
                f"failed to download {reference}: HTTP {exc.response.status_code} from {url}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RepositoryResolutionFailed(f"failed to download {reference} from {url}: {exc}") from exc
        except OSError as exc:
            raise RepositoryResolutionFailed(f"failed to save archive for {reference}: {exc}") from exc

        try:
            root = extract_archive(zip_path, Path(workspace.name) / "extract")
        except (zipfile.BadZipFile, OSError) as exc:
            raise RepositoryResolutionFailed(f"failed to unpack archive for {reference}: {exc}") from exc

        LOGGER.debug("Extracted %s into %s", reference, root)
        return root

    def _save(self, response: httpx.Response, zip_path: Path, reference: RepositoryReference) -> None:
        length = response.headers.get("content-length")
        total = int(length) if length and length.isdigit() else None
        progress = Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            disable=not self.show_progress,
            transient=True,
        )
        with progress, zip_path.open("wb") as handle:
            task = progress.add_task(f"Downloading {escape(str(reference))}", total=total)
            for chunk in response.iter_bytes():
                handle.write(chunk)
                progress.update(task, advance=len(chunk))

    def close(self) -> None:
        while self._workspaces:
            self._workspaces.pop().cleanup()
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None


__all__ = ["ArchiveRepositoryResolver", "archive_url", "extract_archive"]
