"""Single-file component (.vue) splitter: regex-based.

Splits a .vue file into its top-level blocks:
- <template> (matched with nesting, since templates may contain <template>)
- <script> (the block the migration core parses)
- <style> blocks (any number)

Does NOT use tree-sitter. Blocks other than <script> are carried through
verbatim and never analysed.
"""

import logging
import re
from typing import Dict, Optional, Tuple

from .models import SfcBlock, SfcDescriptor

logger = logging.getLogger(__name__)

# Opening tag of a top-level block: <script setup lang="ts">
_OPEN_TAG_RE = re.compile(r"<(template|script|style)\b([^>]*)>", re.IGNORECASE)

# Nested template open/close tags, used to find the matching </template>
_TEMPLATE_TAG_RE = re.compile(r"<template\b[^>]*?(/?)>|</template\s*>", re.IGNORECASE)

# Attribute: name, name="value", name='value' or name=value
_ATTR_RE = re.compile(r"""([\w:@.-]+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?""")

_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


def _parse_attrs(raw: str) -> Dict[str, str]:
    attrs = {}
    for m in _ATTR_RE.finditer(raw):
        value = next((g for g in m.groups()[1:] if g is not None), "")
        attrs[m.group(1).lower()] = value
    return attrs


def _find_template_end(text: str, start: int) -> Optional[Tuple[int, int]]:
    """Return (close_start, close_end) of the </template> matching depth 1."""
    depth = 1
    for m in _TEMPLATE_TAG_RE.finditer(text, start):
        if m.group(0).startswith("</"):
            depth -= 1
            if depth == 0:
                return m.start(), m.end()
        elif not m.group(1):
            depth += 1
    return None


def _find_close(text: str, tag: str, start: int) -> Optional[Tuple[int, int]]:
    m = re.compile(rf"</{tag}\s*>", re.IGNORECASE).search(text, start)
    return (m.start(), m.end()) if m else None


def _skip_comment(text: str, pos: int, open_start: int) -> Optional[int]:
    """If open_start lies inside a top-level HTML comment, return its end."""
    for m in _HTML_COMMENT_RE.finditer(text, pos):
        if m.start() > open_start:
            return None
        if m.end() > open_start:
            return m.end()
    return None


def parse_sfc(text: str, file_path: str = "<sfc>") -> SfcDescriptor:
    """Split single-file component text into its top-level blocks.

    Args:
        text: Full .vue file text
        file_path: File path (for log messages)

    Returns:
        SfcDescriptor; blocks that are absent stay None / empty
    """
    descriptor = SfcDescriptor()
    pos = 0

    while True:
        m = _OPEN_TAG_RE.search(text, pos)
        if not m:
            break

        comment_end = _skip_comment(text, pos, m.start())
        if comment_end is not None:
            pos = comment_end
            continue

        tag = m.group(1).lower()
        raw_attrs = m.group(2)
        if raw_attrs.rstrip().endswith("/"):
            pos = m.end()
            continue

        if tag == "template":
            close = _find_template_end(text, m.end())
        else:
            close = _find_close(text, tag, m.end())
        if close is None:
            logger.warning(f"{file_path}: unclosed <{tag}> block at offset {m.start()}")
            break

        block = SfcBlock(
            tag=tag,
            text=text[m.start():close[1]],
            content=text[m.end():close[0]],
            attrs=_parse_attrs(raw_attrs),
        )
        if tag == "template" and descriptor.template is None:
            descriptor.template = block
        elif tag == "script" and descriptor.script is None:
            descriptor.script = block
        elif tag == "style":
            descriptor.styles.append(block)
        else:
            logger.warning(f"{file_path}: ignoring extra <{tag}> block")

        pos = close[1]

    return descriptor
