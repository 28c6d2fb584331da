"""Block segmentation: split markdown into typed blocks and format them as card text.

Rules:
    - A blank line always closes the open block.
    - A non-blank line opens a new block when nothing is open, when its type
      differs from the open block's type, or when it is a heading (headings
      never merge, even when consecutive).
    - Otherwise the line is appended to the open block.

Line types, first match wins: heading (`#`..`######` + whitespace), code
(``` or ~~~ fence), blockquote (`>`), list (`-`/`*`/`+` + space, or `1. `),
paragraph.
"""

import re
from dataclasses import dataclass

BULLET = "•"
MIN_CARD_LENGTH = 10

_HEADING_RE = re.compile(r'^(#{1,6})\s')
_BULLET_RE = re.compile(r'^[-*+]\s')
_ORDERED_RE = re.compile(r'^\d+\.\s')
_HEADING_STRIP_RE = re.compile(r'^#{1,6}\s*')
_LIST_BULLET_STRIP_RE = re.compile(r'^\s*[-*+]\s*')
_LIST_ORDERED_STRIP_RE = re.compile(r'^\s*\d+\.\s*')
_QUOTE_STRIP_RE = re.compile(r'^\s*>\s*')
_FENCE_OPEN_RE = re.compile(r'^(```|~~~)[\w+-]*[ \t]*\n?')
_FENCE_CLOSE_RE = re.compile(r'\n?(```|~~~)$')


@dataclass
class Block:
    content: str
    type: str             # heading | code | blockquote | list | paragraph
    start_line: int       # 0-based, inclusive
    end_line: int         # 0-based, inclusive
    heading_level: int | None = None


def detect_block_type(line: str) -> str:
    trimmed = line.strip()
    if _HEADING_RE.match(trimmed):
        return "heading"
    if trimmed.startswith("```") or trimmed.startswith("~~~"):
        return "code"
    if trimmed.startswith(">"):
        return "blockquote"
    if _BULLET_RE.match(trimmed) or _ORDERED_RE.match(trimmed):
        return "list"
    return "paragraph"


def _heading_level(line: str) -> int:
    m = _HEADING_RE.match(line.strip())
    return len(m.group(1)) if m else 1


def segment(text: str) -> list[Block]:
    """Split document text into blocks, in document order."""
    blocks: list[Block] = []
    current: Block | None = None

    for i, line in enumerate(text.split("\n")):
        if not line.strip():
            if current:
                blocks.append(current)
                current = None
            continue

        block_type = detect_block_type(line)
        if current is None or current.type != block_type or block_type == "heading":
            if current:
                blocks.append(current)
            current = Block(content=line, type=block_type, start_line=i, end_line=i)
            if block_type == "heading":
                current.heading_level = _heading_level(line)
        else:
            current.content += "\n" + line
            current.end_line = i

    if current:
        blocks.append(current)
    return blocks


def format_for_card(block: Block) -> str:
    """Strip markdown syntax so the block reads as plain card text."""
    content = block.content.strip()

    if block.type == "heading":
        content = _HEADING_STRIP_RE.sub("", content)
    elif block.type == "list":
        lines = []
        for line in content.split("\n"):
            line = _LIST_BULLET_STRIP_RE.sub(BULLET + " ", line, count=1)
            line = _LIST_ORDERED_STRIP_RE.sub(BULLET + " ", line, count=1)
            lines.append(line)
        content = "\n".join(lines)
    elif block.type == "blockquote":
        content = "\n".join(_QUOTE_STRIP_RE.sub("", line) for line in content.split("\n"))
    elif block.type == "code":
        content = _FENCE_OPEN_RE.sub("", content, count=1)
        content = _FENCE_CLOSE_RE.sub("", content, count=1)

    return content.strip()


def card_candidates(text: str) -> list[tuple[Block, str]]:
    """Blocks worth turning into cards, paired with their formatted text.

    Blocks shorter than MIN_CARD_LENGTH after formatting are dropped.
    """
    results = []
    for block in segment(text):
        formatted = format_for_card(block)
        if len(formatted) >= MIN_CARD_LENGTH:
            results.append((block, formatted))
    return results
