from __future__ import annotations

from pathlib import Path

import pytest

from sharedkit.config import TemplateDefinition, TemplateKind
from sharedkit.core.errors import (
    AmbiguousVersionSelector,
    NoTemplateSelected,
    RepositoryResolutionFailed,
    TemplateSourceNotFound,
)
from sharedkit.io.adapters.scripted import ScriptedIO, StaticRepositoryResolver
from sharedkit.reference import SelectorKind
from sharedkit.registry import TemplateRegistry
from sharedkit.resolver import SourceRequest, SourceResolver, SourceState


@pytest.fixture()
def checkout(tmp_path: Path) -> Path:
    path = tmp_path / "checkout"
    path.mkdir()
    return path


@pytest.fixture()
def registry(tmp_path: Path) -> TemplateRegistry:
    (tmp_path / "templates" / "web").mkdir(parents=True)
    (tmp_path / "templates" / "cli").mkdir(parents=True)
    definitions = [
        TemplateDefinition(name="web", kind=TemplateKind.PROJECT, template="templates/web"),
        TemplateDefinition(name="lib", kind=TemplateKind.PACKAGE, repo="octocat/lib#main"),
        TemplateDefinition(name="cli", kind=TemplateKind.PROJECT, template="templates/cli"),
    ]
    return TemplateRegistry(definitions, config_path=tmp_path / "metadata.toml")


@pytest.fixture()
def repositories(checkout: Path) -> StaticRepositoryResolver:
    return StaticRepositoryResolver({"octocat/lib": checkout, "octocat/Hello-World": checkout})


def test_explicit_local_path_wins(registry, repositories, tmp_path: Path):
    local = tmp_path / "adhoc"
    local.mkdir()
    resolver = SourceResolver(registry, repositories, ScriptedIO())

    source = resolver.resolve(SourceRequest(template_path=local, repo="octocat/Hello-World"))

    assert source.root == local
    assert source.definition is None
    assert repositories.requested == []
    assert resolver.states == [SourceState.START, SourceState.HAVE_LOCAL_PATH, SourceState.RESOLVED]


def test_missing_local_path_is_fatal(registry, repositories, tmp_path: Path):
    resolver = SourceResolver(registry, repositories)
    with pytest.raises(TemplateSourceNotFound) as excinfo:
        resolver.resolve(SourceRequest(template_path=tmp_path / "absent"))
    assert excinfo.value.path == tmp_path / "absent"
    assert resolver.states[-1] is SourceState.ABORTED


def test_explicit_repository(registry, repositories, checkout: Path):
    resolver = SourceResolver(registry, repositories)
    source = resolver.resolve(SourceRequest(repo="octocat/Hello-World@v1.0.0"))

    assert source.root == checkout
    assert source.reference is not None
    assert source.reference.selector.kind is SelectorKind.TAG
    assert resolver.states == [SourceState.START, SourceState.HAVE_REPO_REF, SourceState.RESOLVED]


def test_repository_parse_error_propagates(registry, repositories):
    with pytest.raises(AmbiguousVersionSelector):
        SourceResolver(registry, repositories).resolve(SourceRequest(repo="a/b#c@d"))
    assert repositories.requested == []


def test_repository_resolution_failure(registry, repositories):
    resolver = SourceResolver(registry, repositories)
    with pytest.raises(RepositoryResolutionFailed):
        resolver.resolve(SourceRequest(repo="someone/unknown"))
    assert resolver.states[-1] is SourceState.ABORTED


def test_kind_filter_offers_only_matching_templates(registry, repositories, tmp_path: Path):
    chooser = ScriptedIO(choices=["cli (project)"])
    resolver = SourceResolver(registry, repositories, chooser)

    source = resolver.resolve(SourceRequest(kind=TemplateKind.PROJECT))

    assert chooser.offered == [("web (project)", "cli (project)")]
    assert source.definition is registry.by_name("cli")
    assert source.root == tmp_path / "templates" / "cli"
    assert resolver.states == [
        SourceState.START,
        SourceState.FILTER_BY_KIND,
        SourceState.INTERACTIVE_CHOICE,
        SourceState.HAVE_LOCAL_PATH,
        SourceState.RESOLVED,
    ]


def test_choice_of_repository_template_resolves_repo(registry, repositories, checkout: Path):
    resolver = SourceResolver(registry, repositories, ScriptedIO(choices=[1]))
    source = resolver.resolve(SourceRequest())
    assert source.definition is registry.by_name("lib")
    assert source.root == checkout
    assert repositories.requested[0].selector.value == "main"


def test_declined_choice_aborts(registry, repositories):
    resolver = SourceResolver(registry, repositories, ScriptedIO(choices=[None]))
    with pytest.raises(NoTemplateSelected):
        resolver.resolve(SourceRequest())
    assert resolver.states[-1] is SourceState.ABORTED


def test_no_candidates_for_kind(registry, repositories):
    resolver = SourceResolver(registry, repositories, ScriptedIO(choices=[0]))
    with pytest.raises(NoTemplateSelected) as excinfo:
        resolver.resolve(SourceRequest(kind=TemplateKind.MONOREPO))
    assert "monorepo" in excinfo.value.detail


def test_no_chooser_available(registry, repositories):
    with pytest.raises(NoTemplateSelected):
        SourceResolver(registry, repositories, None).resolve(SourceRequest())


def test_template_name_lookup(registry, repositories, tmp_path: Path):
    source = SourceResolver(registry, repositories).resolve(SourceRequest(template_name="web"))
    assert source.root == tmp_path / "templates" / "web"

    with pytest.raises(TemplateSourceNotFound):
        SourceResolver(registry, repositories).resolve(SourceRequest(template_name="nope"))
