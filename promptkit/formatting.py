"""Text block formatting for compiled prompts. Pure helpers; no library access."""

from __future__ import annotations

import re
from typing import Iterable

_EXCESS_NEWLINES = re.compile(r"\n{3,}")


def format_section(title: str, blocks: Iterable[str | None]) -> str:
    cleaned = [text.strip() for text in ((b or "") for b in blocks)]
    cleaned = [text for text in cleaned if text]
    if not cleaned:
        return ""
    return f"{title}\n" + "\n\n".join(cleaned) + "\n"


def format_constraints(constraints: Iterable[str]) -> str:
    cleaned = [c.strip() for c in constraints]
    lines = [f"- {c}" for c in cleaned if c]
    if not lines:
        return ""
    return "CONSTRAINTS\n" + "\n".join(lines) + "\n"


def format_identity(
    *,
    character_ref: str | None,
    product_ref: str | None,
    environment_ref: str | None,
) -> str:
    lines: list[str] = []
    if character_ref:
        lines.append("Use the uploaded CHARACTER REFERENCE IMAGE as the exact identity.")
    if product_ref:
        lines.append("Use the uploaded PRODUCT REFERENCE IMAGE as the exact source.")
    if environment_ref:
        lines.append("Use the uploaded ENVIRONMENT REFERENCE IMAGE as the spatial anchor.")
    if not lines:
        lines.append("No reference images specified.")
    return "\n".join(lines)


def join_blocks(blocks: Iterable[str]) -> str:
    """Join section blocks into the final text with exactly one trailing newline."""

    joined = "\n".join(blocks)
    return _EXCESS_NEWLINES.sub("\n\n", joined).strip() + "\n"
