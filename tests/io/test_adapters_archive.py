from __future__ import annotations

import io
import zipfile
from pathlib import Path

import httpx
import pytest
from rich.console import Console

from sharedkit.core.errors import RepositoryResolutionFailed
from sharedkit.io.adapters.archive import ArchiveRepositoryResolver, archive_url, extract_archive
from sharedkit.reference import parse_reference


def _zip_bytes(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("octocat/Hello-World#main", "https://github.com/octocat/Hello-World/archive/refs/heads/main.zip"),
        ("octocat/Hello-World@v1.0.0", "https://github.com/octocat/Hello-World/archive/refs/tags/v1.0.0.zip"),
        ("octocat/Hello-World@abcdef1", "https://github.com/octocat/Hello-World/archive/abcdef1.zip"),
        ("octocat/Hello-World", "https://github.com/octocat/Hello-World/archive/HEAD.zip"),
        (
            "https://gitlab.com/gitlab-org/gitlab@v16.0",
            "https://gitlab.com/gitlab-org/gitlab/-/archive/v16.0/gitlab-v16.0.zip",
        ),
        ("https://gitlab.com/group/app", "https://gitlab.com/group/app/-/archive/HEAD/app-HEAD.zip"),
    ],
)
def test_archive_url(raw: str, expected: str):
    assert archive_url(parse_reference(raw)) == expected


def test_extract_archive_returns_single_root_dir(tmp_path: Path):
    zip_path = tmp_path / "sample.zip"
    zip_path.write_bytes(_zip_bytes({"test_dir/sample.txt": "Hello, world!"}))

    root = extract_archive(zip_path, tmp_path / "extract")

    assert root.name == "test_dir"
    assert (root / "sample.txt").read_text(encoding="utf-8") == "Hello, world!"


def test_resolve_downloads_and_cleans_up():
    payload = _zip_bytes({"Hello-World-main/README": "hi", "Hello-World-main/src/a.txt": "a"})
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=payload)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    resolver = ArchiveRepositoryResolver(client)

    root = resolver.resolve(parse_reference("octocat/Hello-World#main"))

    assert seen == ["https://github.com/octocat/Hello-World/archive/refs/heads/main.zip"]
    assert (root / "src" / "a.txt").read_text(encoding="utf-8") == "a"

    resolver.close()
    assert not root.exists()
    client.close()


def test_http_error_is_a_resolution_failure():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    with ArchiveRepositoryResolver(client) as resolver:
        with pytest.raises(RepositoryResolutionFailed) as excinfo:
            resolver.resolve(parse_reference("octocat/missing"))
    assert "404" in excinfo.value.detail


def test_transport_error_is_a_resolution_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    with ArchiveRepositoryResolver(client) as resolver:
        with pytest.raises(RepositoryResolutionFailed):
            resolver.resolve(parse_reference("octocat/Hello-World"))


def test_corrupt_archive_is_a_resolution_failure():
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"not a zip")))
    with ArchiveRepositoryResolver(client) as resolver:
        with pytest.raises(RepositoryResolutionFailed):
            resolver.resolve(parse_reference("octocat/Hello-World"))


def test_progress_display_uses_content_length():
    payload = _zip_bytes({"repo-main/a.txt": "a"})
    client = httpx.Client(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, headers={"Content-Length": str(len(payload))}, content=payload)
        )
    )
    resolver = ArchiveRepositoryResolver(
        client, show_progress=True, console=Console(file=io.StringIO(), force_terminal=True)
    )

    with resolver:
        root = resolver.resolve(parse_reference("octocat/repo"))
        assert (root / "a.txt").read_text(encoding="utf-8") == "a"


def test_archive_save_failure_is_a_resolution_failure(monkeypatch: pytest.MonkeyPatch):
    client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"zip")))

    def refuse(self: Path, *args, **kwargs):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "open", refuse)
    with ArchiveRepositoryResolver(client) as resolver:
        with pytest.raises(RepositoryResolutionFailed) as excinfo:
            resolver.resolve(parse_reference("octocat/repo"))
    assert "failed to save archive" in excinfo.value.detail
