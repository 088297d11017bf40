from __future__ import annotations

from pathlib import PurePosixPath, PureWindowsPath

import pytest

from sharedkit.core.errors import InvalidFilterPattern
from sharedkit.matcher import FilterRule, PathFilter, is_included, normalize_path, parse_rules


def test_parse_distinguishes_regex_and_literal():
    assert FilterRule.parse("regex:^a$") == FilterRule(kind="regex", pattern="^a$")
    assert FilterRule.parse("/src") == FilterRule(kind="literal", pattern="/src")
    assert str(FilterRule.parse("regex:^a$")) == "regex:^a$"


def test_normalize_path_uses_forward_slashes():
    assert normalize_path(PureWindowsPath("src\\lib\\mod.py")) == "src/lib/mod.py"
    assert normalize_path("./src//index.ts") == "src/index.ts"
    assert normalize_path(PurePosixPath("a/b")) == "a/b"


def test_anchored_literal_covers_nested_paths():
    rule = FilterRule.parse("/src")
    assert rule.matches("src")
    assert rule.matches("src/index.ts")
    assert not rule.matches("lib/src/index.ts")
    assert not rule.matches("srcfoo/index.ts")


def test_bare_literal_matches_segment_anywhere():
    rule = FilterRule.parse("package.json")
    assert rule.matches("package.json")
    assert rule.matches("packages/core/package.json")
    assert not rule.matches("package.json.bak")

    node_modules = FilterRule.parse("node_modules")
    assert node_modules.matches("web/node_modules/react/index.js")


def test_literal_with_inner_slash_is_root_relative():
    rule = FilterRule.parse("src/lib")
    assert rule.matches("src/lib/util.ts")
    assert not rule.matches("other/src/lib/util.ts")


def test_readme_regex():
    rule = FilterRule.parse(r"regex:^README(\.md)?$")
    assert rule.matches("README")
    assert rule.matches("README.md")
    assert not rule.matches("README.txt")


def test_exclude_takes_precedence():
    includes = parse_rules(["/src"])
    excludes = parse_rules(["/src"])
    assert is_included("src/index.ts", includes, excludes) is False


def test_empty_includes_mean_everything():
    assert is_included("anything/at/all.txt", (), ())
    assert not is_included("dist/app.js", (), parse_rules(["dist"]))


def test_copy_set_scenario():
    path_filter = PathFilter(parse_rules(["/src", "package.json"]), parse_rules(["/src/secrets"]))
    assert path_filter("src/index.ts")
    assert path_filter("package.json")
    assert not path_filter("src/secrets/key.pem")
    assert not path_filter("README.md")


def test_invalid_regex_is_reported_with_rule():
    rule = FilterRule.parse("regex:([unclosed")
    with pytest.raises(InvalidFilterPattern) as excinfo:
        rule.matches("anything")
    assert excinfo.value.rule == "regex:([unclosed"


def test_validate_surfaces_bad_patterns_before_matching():
    path_filter = PathFilter(parse_rules(["regex:ok"]), parse_rules(["regex:*bad"]))
    with pytest.raises(InvalidFilterPattern):
        path_filter.validate()


def test_parse_rules_handles_none():
    assert parse_rules(None) == ()
