from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from promptkit.governor import (
    AddVariation,
    AppState,
    Compile,
    Event,
    SelectModule,
    SetRef,
    initial_state,
    reduce,
    selection_rejection,
)
from promptkit.library import Library
from promptkit.scope import REF_SLOTS
from shoot_studio.framework.config import SessionConfig

_default_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RejectedEvent:
    index: int
    event: Event
    message: str


@dataclass(frozen=True)
class Replay:
    state: AppState
    rejected: tuple[RejectedEvent, ...] = ()


def events_from_session(session: SessionConfig, *, include_compile: bool = True) -> list[Event]:
    """Translate a configured session into the event sequence a user would dispatch."""

    events: list[Event] = []
    for slot in REF_SLOTS:
        value = session.refs.get(slot)
        if value:
            events.append(SetRef(slot=slot, value=value))
    events.extend(SelectModule(module_id=module_id) for module_id in session.modules)
    events.extend(AddVariation(variation_id=variation) for variation in session.variations)
    if include_compile:
        events.append(Compile())
    return events


def replay_events(
    events: Iterable[Event],
    library: Library,
    *,
    logger: logging.Logger | None = None,
    state: AppState | None = None,
) -> Replay:
    """
    Fold `events` through `reduce`.

    Later events overwrite `state.errors`, so selections the reducer refused are
    collected separately and returned alongside the final state.
    """

    log = logger or _default_logger
    current = state if state is not None else initial_state()
    rejected: list[RejectedEvent] = []
    for idx, event in enumerate(events):
        rejection = (
            selection_rejection(event.module_id, current, library)
            if isinstance(event, SelectModule)
            else None
        )
        current = reduce(current, event, library)
        if rejection:
            rejected.append(RejectedEvent(index=idx, event=event, message=rejection))
            log.warning("Event %d %s -> rejected: %s", idx, event, rejection)
        elif current.errors:
            log.info("Event %d %s -> errors: %s", idx, event, "; ".join(current.errors))
        else:
            log.debug("Event %d %s -> ok", idx, event)
    return Replay(state=current, rejected=tuple(rejected))
