"""Artifact helpers (compile records and session ids).

Independent of `shoot_studio.app` (framework boundary).
"""

from .record import generate_session_id, state_payload, utc_now_iso8601, write_compile_record

__all__ = [
    "generate_session_id",
    "state_payload",
    "utc_now_iso8601",
    "write_compile_record",
]
