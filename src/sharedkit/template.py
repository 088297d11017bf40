"""Literal placeholder substitution for template file contents."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping

__all__ = [
    "BINARY_SNIFF_BYTES",
    "decode_text",
    "looks_binary",
    "read_template_file",
    "substitute",
]


BINARY_SNIFF_BYTES = 8192

# Control bytes that essentially never appear in text files.
_TEXT_CONTROL_BYTES = frozenset({7, 8, 9, 10, 12, 13, 27})
_NON_TEXT_BYTES = bytes(b for b in range(32) if b not in _TEXT_CONTROL_BYTES) + b"\x7f"


def _placeholder_pattern(tokens: tuple[str, ...]) -> re.Pattern[str]:
    # Longest tokens first so "{{name_full}}" wins over a "{{name" prefix.
    ordered = sorted(tokens, key=len, reverse=True)
    return re.compile("|".join(re.escape(token) for token in ordered))


def substitute(content: str, values: Mapping[str, str]) -> str:
    """Replace every literal occurrence of each placeholder in ``content``.

    The scan is a single left-to-right pass, so replacement values are never
    rescanned for further placeholders. Placeholders missing from ``content`` are
    simply not used.
    """

    tokens = tuple(token for token in values if token)
    if not tokens or not content:
        return content

    pattern = _placeholder_pattern(tokens)
    return pattern.sub(lambda match: values[match.group(0)], content)


def looks_binary(data: bytes) -> bool:
    """Heuristically decide whether ``data`` holds binary content."""

    sample = data[:BINARY_SNIFF_BYTES]
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    non_text = sample.translate(None, _NON_TEXT_BYTES)
    return len(sample) - len(non_text) > len(sample) * 0.1


def decode_text(data: bytes) -> str | None:
    """Decode ``data`` as UTF-8 text, returning ``None`` for binary payloads."""

    if looks_binary(data):
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def read_template_file(path: str | Path) -> str | bytes:
    """Read ``path`` returning text when it decodes cleanly, raw bytes otherwise."""

    data = Path(path).read_bytes()
    text = decode_text(data)
    return data if text is None else text
