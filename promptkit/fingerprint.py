from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from promptkit.governor import AppState


def canonical_view(state: "AppState") -> dict[str, Any]:
    return {
        "refs": state.refs.as_dict(),
        "selected": state.selected.as_dict(),
        "variations": sorted(state.variations),
    }


def stable_stringify(value: Any) -> str:
    """Serialize with recursively sorted keys and no insignificant whitespace."""

    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def djb2(text: str) -> int:
    """32-bit djb2 (xor variant) over the string's code points."""

    value = 5381
    for ch in text:
        value = (((value << 5) + value) ^ ord(ch)) & 0xFFFFFFFF
    return value


def fingerprint(state: "AppState") -> str:
    return f"{djb2(stable_stringify(canonical_view(state))):08x}"
