from __future__ import annotations

import json
import os
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from promptkit.governor import AppState
from shoot_studio.framework.session import RejectedEvent


def utc_now_iso8601() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def generate_session_id() -> str:
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4()}"


def state_payload(state: AppState) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "refs": state.refs.as_dict(),
        "selected": state.selected.as_dict(),
        "variations": list(state.variations),
        "errors": list(state.errors),
    }
    if state.compiled is not None:
        payload["compiled"] = {
            "fingerprint": state.compiled.fingerprint,
            "used_module_ids": list(state.compiled.used_module_ids),
            "deduped_constraints": list(state.compiled.deduped_constraints),
            "prompt": state.compiled.prompt,
        }
    return payload


def write_compile_record(
    path: str,
    state: AppState,
    *,
    session_id: str,
    created_at: str,
    rejected: Sequence[RejectedEvent] = (),
) -> None:
    payload: dict[str, Any] = {
        "session_id": session_id,
        "created_at": created_at,
        **state_payload(state),
        "rejected_events": [
            {"index": item.index, "event": repr(item.event), "message": item.message}
            for item in rejected
        ],
    }

    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as file:
        json.dump(payload, file, ensure_ascii=False, indent=2)
        file.write("\n")
