"""Deterministic prompt assembly kernel (module library, compiler, governed state).

This package is intentionally independent of `shoot_studio.*`. Loading module
records from disk, configuration and artifact writing live in the consuming
application.
"""

from promptkit.compiler import CompileInput, CompileOutput, compile_prompt
from promptkit.errors import (
    DuplicateModuleId,
    DuplicateSelectedId,
    MissingReference,
    PromptKitError,
    UnknownModuleId,
)
from promptkit.fingerprint import fingerprint
from promptkit.governor import (
    AddVariation,
    AppState,
    ClearCategory,
    ClearRef,
    Compile,
    CompiledPrompt,
    DeselectModule,
    Event,
    RefSlots,
    RemoveVariation,
    Selection,
    SelectModule,
    SetRef,
    initial_state,
    reduce,
    selection_rejection,
    validate_state,
)
from promptkit.library import (
    ALL_CATEGORIES,
    SELECTABLE_CATEGORIES,
    Category,
    Library,
    Module,
)
from promptkit.scope import REF_SLOTS, ModuleMeta, RefSlot, ReferenceRequirements, Scope, derive_meta

__all__ = [
    "ALL_CATEGORIES",
    "AddVariation",
    "AppState",
    "Category",
    "ClearCategory",
    "ClearRef",
    "Compile",
    "CompileInput",
    "CompileOutput",
    "CompiledPrompt",
    "DeselectModule",
    "DuplicateModuleId",
    "DuplicateSelectedId",
    "Event",
    "Library",
    "MissingReference",
    "Module",
    "ModuleMeta",
    "PromptKitError",
    "REF_SLOTS",
    "RefSlot",
    "RefSlots",
    "ReferenceRequirements",
    "RemoveVariation",
    "SELECTABLE_CATEGORIES",
    "Scope",
    "SelectModule",
    "Selection",
    "SetRef",
    "UnknownModuleId",
    "compile_prompt",
    "derive_meta",
    "fingerprint",
    "initial_state",
    "reduce",
    "selection_rejection",
    "validate_state",
]
