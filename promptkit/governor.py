from __future__ import annotations

"""Governed selection state: immutable snapshots threaded through `reduce`.

Every event yields a brand-new `AppState`. Soft errors accumulate on `state.errors`
and are the sole gate for compilation; `reduce` never raises for a well-formed event.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Union

from promptkit.compiler import CompileInput, CompileOutput, compile_prompt
from promptkit.fingerprint import fingerprint
from promptkit.library import SELECTABLE_CATEGORIES, Library, Module
from promptkit.scope import REF_SLOTS, ModuleMeta, Scope, derive_meta

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefSlots:
    character: str | None = None
    product: str | None = None
    environment: str | None = None

    def get(self, slot: str) -> str | None:
        _check_slot(slot)
        return getattr(self, slot)

    def with_slot(self, slot: str, value: str | None) -> "RefSlots":
        _check_slot(slot)
        return replace(self, **{slot: value})

    def as_dict(self) -> dict[str, str | None]:
        return {slot: getattr(self, slot) for slot in REF_SLOTS}


@dataclass(frozen=True)
class Selection:
    """Selected module ids per category. v1 cap: at most one id per category."""

    facial_pose: tuple[str, ...] = ()
    anatomy_pose: tuple[str, ...] = ()
    apparel_textile: tuple[str, ...] = ()
    product: tuple[str, ...] = ()
    cinematography: tuple[str, ...] = ()

    def get(self, category: str) -> tuple[str, ...]:
        _check_category(category)
        return getattr(self, category)

    def with_category(self, category: str, ids: tuple[str, ...]) -> "Selection":
        _check_category(category)
        return replace(self, **{category: tuple(ids)})

    def without(self, module_id: str) -> "Selection":
        return Selection(
            **{
                category: tuple(i for i in getattr(self, category) if i != module_id)
                for category in SELECTABLE_CATEGORIES
            }
        )

    def flatten(self) -> tuple[str, ...]:
        """All selected ids in canonical category order."""

        ids: list[str] = []
        for category in SELECTABLE_CATEGORIES:
            ids.extend(getattr(self, category))
        return tuple(ids)

    def as_dict(self) -> dict[str, list[str]]:
        return {category: list(getattr(self, category)) for category in SELECTABLE_CATEGORIES}


@dataclass(frozen=True)
class CompiledPrompt(CompileOutput):
    fingerprint: str


@dataclass(frozen=True)
class AppState:
    refs: RefSlots = field(default_factory=RefSlots)
    selected: Selection = field(default_factory=Selection)
    variations: tuple[str, ...] = ()
    compiled: CompiledPrompt | None = None
    errors: tuple[str, ...] = ()


def _check_slot(slot: str) -> None:
    if slot not in REF_SLOTS:
        raise ValueError(f"Unknown reference slot: {slot!r} (expected one of: {', '.join(REF_SLOTS)})")


def _check_category(category: str) -> None:
    if category not in SELECTABLE_CATEGORIES:
        raise ValueError(
            f"Unknown selectable category: {category!r} "
            f"(expected one of: {', '.join(SELECTABLE_CATEGORIES)})"
        )


def _check_id(value: Any, *, name: str) -> None:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string (type={type(value).__name__})")


@dataclass(frozen=True)
class SetRef:
    slot: str
    value: str | None

    def __post_init__(self) -> None:
        _check_slot(self.slot)
        if self.value is not None and not isinstance(self.value, str):
            raise TypeError(f"SetRef.value must be a string or None (type={type(self.value).__name__})")


@dataclass(frozen=True)
class ClearRef:
    slot: str

    def __post_init__(self) -> None:
        _check_slot(self.slot)


@dataclass(frozen=True)
class SelectModule:
    module_id: str

    def __post_init__(self) -> None:
        _check_id(self.module_id, name="SelectModule.module_id")


@dataclass(frozen=True)
class DeselectModule:
    module_id: str

    def __post_init__(self) -> None:
        _check_id(self.module_id, name="DeselectModule.module_id")


@dataclass(frozen=True)
class ClearCategory:
    category: str

    def __post_init__(self) -> None:
        _check_category(self.category)


@dataclass(frozen=True)
class AddVariation:
    variation_id: str

    def __post_init__(self) -> None:
        _check_id(self.variation_id, name="AddVariation.variation_id")


@dataclass(frozen=True)
class RemoveVariation:
    variation_id: str

    def __post_init__(self) -> None:
        _check_id(self.variation_id, name="RemoveVariation.variation_id")


@dataclass(frozen=True)
class Compile:
    pass


Event = Union[
    SetRef,
    ClearRef,
    SelectModule,
    DeselectModule,
    ClearCategory,
    AddVariation,
    RemoveVariation,
    Compile,
]


def initial_state() -> AppState:
    return AppState()


def resolve_modules(state: AppState, library: Library) -> list[Module]:
    """Resolve selected ids; an unknown id here means the state invariants were bypassed."""

    return [library.require(module_id) for module_id in state.selected.flatten()]


def _any_scope(metas: list[ModuleMeta], scope: Scope) -> bool:
    return any(meta.scope == scope for meta in metas)


def validate_state(state: AppState, library: Library) -> tuple[str, ...]:
    errors: list[str] = []
    metas = [derive_meta(m) for m in resolve_modules(state, library)]

    for slot in REF_SLOTS:
        if any(meta.requires.requires(slot) for meta in metas) and not state.refs.get(slot):
            errors.append(f"Missing {slot} reference.")

    selected_count = len(metas)
    if _any_scope(metas, "hands_only") and selected_count > 1:
        errors.append("Hands-only module cannot be combined with other modules in v1.")
    if _any_scope(metas, "environment_only") and selected_count > 1:
        errors.append("Environment-only module cannot be combined with other modules in v1.")

    return tuple(errors)


def scope_violation_on_select(module: Module, state: AppState, library: Library) -> str | None:
    """Check exclusivity against modules already selected in other categories."""

    others = [
        library.require(module_id)
        for category in SELECTABLE_CATEGORIES
        if category != module.category
        for module_id in state.selected.get(category)
    ]
    if not others:
        return None

    incoming = derive_meta(module)
    existing = [derive_meta(m) for m in others]

    if incoming.scope == "hands_only":
        return "Hands-only module must be used alone in v1."
    if _any_scope(existing, "hands_only"):
        return "Cannot add modules when a hands-only module is selected in v1."
    if incoming.scope == "environment_only":
        return "Environment-only module must be used alone in v1."
    if _any_scope(existing, "environment_only"):
        return "Cannot add modules when an Environment-only module is selected in v1."
    return None


def selection_rejection(module_id: str, state: AppState, library: Library) -> str | None:
    """Message explaining why selecting `module_id` would be refused, or None."""

    module = library.get(module_id)
    if module is None:
        return f"Unknown module id: '{module_id}'"
    if module.is_global:
        return f"Unsupported module category for selection: '{module.category}'"
    return scope_violation_on_select(module, state, library)


def make_compile_input(state: AppState) -> CompileInput:
    return CompileInput(
        character_ref=state.refs.character,
        product_ref=state.refs.product,
        environment_ref=state.refs.environment,
        selected_modules=state.selected.flatten(),
        variation_ids=state.variations,
    )


def _revalidated(state: AppState, library: Library) -> AppState:
    errors = validate_state(state, library)
    if errors:
        return replace(state, errors=errors, compiled=None)
    return replace(state, errors=())


def _rejected(state: AppState, message: str) -> AppState:
    logger.debug("Event rejected: %s", message)
    return replace(state, errors=(message,), compiled=None)


def reduce(state: AppState, event: Event, library: Library) -> AppState:
    if isinstance(event, SetRef):
        return _revalidated(replace(state, refs=state.refs.with_slot(event.slot, event.value)), library)

    if isinstance(event, ClearRef):
        return _revalidated(replace(state, refs=state.refs.with_slot(event.slot, None)), library)

    if isinstance(event, AddVariation):
        variations = state.variations
        if event.variation_id not in variations:
            variations = (*variations, event.variation_id)
        return _revalidated(replace(state, variations=variations), library)

    if isinstance(event, RemoveVariation):
        variations = tuple(v for v in state.variations if v != event.variation_id)
        return _revalidated(replace(state, variations=variations), library)

    if isinstance(event, ClearCategory):
        selected = state.selected.with_category(event.category, ())
        return _revalidated(replace(state, selected=selected), library)

    if isinstance(event, DeselectModule):
        module = library.get(event.module_id)
        if module is not None and not module.is_global:
            current = state.selected.get(module.category)
            selected = state.selected.with_category(
                module.category, tuple(i for i in current if i != event.module_id)
            )
        else:
            selected = state.selected.without(event.module_id)
        return _revalidated(replace(state, selected=selected), library)

    if isinstance(event, SelectModule):
        rejection = selection_rejection(event.module_id, state, library)
        if rejection:
            return _rejected(state, rejection)

        module = library.require(event.module_id)
        # v1 cap: the new selection replaces whatever the category held.
        selected = state.selected.with_category(module.category, (module.id,))
        return _revalidated(replace(state, selected=selected), library)

    if isinstance(event, Compile):
        errors = validate_state(state, library)
        if errors:
            logger.debug("Compile blocked by %d error(s)", len(errors))
            return replace(state, errors=errors, compiled=None)

        output = compile_prompt(make_compile_input(state), library)
        compiled = CompiledPrompt(
            prompt=output.prompt,
            used_module_ids=output.used_module_ids,
            deduped_constraints=output.deduped_constraints,
            fingerprint=fingerprint(state),
        )
        return replace(state, compiled=compiled, errors=())

    raise TypeError(f"Unsupported event type: {type(event).__name__}")
