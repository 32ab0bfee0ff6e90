from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from promptkit.governor import AppState
from shoot_studio.foundation.logging_utils import close_logger, setup_operational_logger, write_text_log
from shoot_studio.framework.artifacts import generate_session_id, utc_now_iso8601, write_compile_record
from shoot_studio.framework.config import StudioConfig
from shoot_studio.framework.library_io import load_library_from_data_dir
from shoot_studio.framework.session import RejectedEvent, events_from_session, replay_events


@dataclass(frozen=True)
class SessionResult:
    session_id: str
    state: AppState
    prompt_path: str | None
    record_path: str | None
    oplog_path: str
    rejected: tuple[RejectedEvent, ...] = ()

    @property
    def ok(self) -> bool:
        return self.state.compiled is not None and not self.state.errors and not self.rejected


def _log_config_meta(logger, config_meta: dict[str, Any] | None) -> None:
    if not config_meta:
        return
    mode = config_meta.get("mode")
    paths = config_meta.get("paths") or []
    if mode in {"env", "explicit"} and paths:
        label = f"env {config_meta.get('env_var')}" if mode == "env" else "explicit path"
        logger.info("Loaded config from %s=%s", label, paths[0])
    elif len(paths) > 1:
        logger.info("Loaded config base=%s local=%s", paths[0], paths[1])
    elif paths:
        logger.info("Loaded config base=%s", paths[0])


def run_session(
    cfg_dict: dict[str, Any],
    *,
    session_id: str | None = None,
    config_meta: dict[str, Any] | None = None,
    final_compile: bool = True,
) -> SessionResult:
    """Replay the configured session against the module library and write artifacts."""

    cfg, cfg_warnings = StudioConfig.from_dict(cfg_dict)

    session_id = session_id or generate_session_id()
    logger, oplog_path = setup_operational_logger(cfg.log_dir, session_id)
    _log_config_meta(logger, config_meta)
    for warning in cfg_warnings:
        logger.warning("%s", warning)

    phase = "library_load"
    try:
        logger.info("Loading module library from %s", cfg.data_dir)
        library = load_library_from_data_dir(cfg.data_dir)
        logger.info("Loaded %d modules (%d global rules)", len(library), len(library.globals))

        phase = "replay"
        events = events_from_session(cfg.session, include_compile=final_compile)
        replay = replay_events(events, library, logger=logger)
        state = replay.state
        for item in replay.rejected:
            logger.error("Rejected selection: %s", item.message)

        prompt_path: str | None = None
        record_path: str | None = None

        phase = "artifacts"
        if state.compiled is not None:
            logger.info(
                "Compiled prompt fingerprint=%s modules=%s constraints=%d",
                state.compiled.fingerprint,
                ",".join(state.compiled.used_module_ids) or "<none>",
                len(state.compiled.deduped_constraints),
            )
            if replay.rejected:
                logger.error("Not writing prompt: %d selection(s) were rejected", len(replay.rejected))
            elif cfg.write_prompt:
                prompt_path = os.path.join(cfg.log_dir, f"{session_id}_prompt.txt")
                write_text_log(prompt_path, state.compiled.prompt)
                logger.info("Wrote prompt to %s", prompt_path)
        elif state.errors:
            for error in state.errors:
                logger.error("Validation error: %s", error)

        if cfg.write_record:
            record_path = os.path.join(cfg.log_dir, f"{session_id}_record.json")
            write_compile_record(
                record_path,
                state,
                session_id=session_id,
                created_at=utc_now_iso8601(),
                rejected=replay.rejected,
            )
            logger.info("Wrote session record to %s", record_path)
    except Exception:
        logger.exception("Session %s failed during %s", session_id, phase)
        raise
    finally:
        close_logger(logger)

    return SessionResult(
        session_id=session_id,
        state=state,
        prompt_path=prompt_path,
        record_path=record_path,
        oplog_path=oplog_path,
        rejected=replay.rejected,
    )


def run_compile(
    cfg_dict: dict[str, Any],
    *,
    session_id: str | None = None,
    config_meta: dict[str, Any] | None = None,
) -> SessionResult:
    return run_session(cfg_dict, session_id=session_id, config_meta=config_meta, final_compile=True)
