from __future__ import annotations

"""Deterministic prompt compiler.

- Canonical section order, independent of selection order.
- Constraints deduplicated by exact string and sorted lexicographically.
- Global rules always included, in library load order.
- Fail-fast on duplicate ids, unknown ids and missing required references.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from promptkit.errors import DuplicateSelectedId, MissingReference
from promptkit.formatting import format_constraints, format_identity, format_section, join_blocks
from promptkit.library import SELECTABLE_CATEGORIES, Library, Module
from promptkit.scope import REF_SLOTS, derive_requirements

logger = logging.getLogger(__name__)

SECTION_TITLES: dict[str, str] = {
    "facial_pose": "FACIAL POSES",
    "anatomy_pose": "ANATOMY / BODY",
    "apparel_textile": "APPAREL / TEXTILE",
    "product": "PRODUCT / MACRO",
    "cinematography": "CINEMATOGRAPHY",
}


@dataclass(frozen=True)
class CompileInput:
    selected_modules: tuple[str, ...] = ()
    character_ref: str | None = None
    product_ref: str | None = None
    environment_ref: str | None = None
    variation_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("selected_modules", "variation_ids"):
            value = getattr(self, name)
            if isinstance(value, str):
                raise TypeError(f"CompileInput.{name} must be a sequence of strings, not a string")
            object.__setattr__(self, name, tuple(value))

    def ref(self, slot: str) -> str | None:
        if slot not in REF_SLOTS:
            raise ValueError(f"Unknown reference slot: {slot!r}")
        return getattr(self, f"{slot}_ref")


@dataclass(frozen=True)
class CompileOutput:
    prompt: str
    used_module_ids: tuple[str, ...]
    deduped_constraints: tuple[str, ...]


def assert_unique_module_ids(ids: Sequence[str]) -> None:
    seen: set[str] = set()
    for module_id in ids:
        if module_id in seen:
            raise DuplicateSelectedId(module_id)
        seen.add(module_id)


def validate_references(modules: Sequence[Module], compile_input: CompileInput) -> None:
    """Raise MissingReference for the first required slot that has no handle."""

    needed = [derive_requirements(m.prompt_text) for m in modules]
    for slot in REF_SLOTS:
        if any(req.requires(slot) for req in needed) and not compile_input.ref(slot):
            raise MissingReference(slot)


def dedupe_constraints(modules: Sequence[Module]) -> tuple[str, ...]:
    unique: set[str] = set()
    for module in modules:
        unique.update(c.strip() for c in module.constraints if c.strip())
    return tuple(sorted(unique))


def compile_prompt(compile_input: CompileInput, library: Library) -> CompileOutput:
    assert_unique_module_ids(compile_input.selected_modules)

    resolved = [library.require(module_id) for module_id in compile_input.selected_modules]
    validate_references(resolved, compile_input)

    deduped_constraints = dedupe_constraints(resolved)

    by_category: dict[str, list[Module]] = {}
    for module in resolved:
        by_category.setdefault(module.category, []).append(module)

    blocks: list[str] = [
        format_section(
            "IDENTITY & REFERENCES",
            [
                format_identity(
                    character_ref=compile_input.character_ref,
                    product_ref=compile_input.product_ref,
                    environment_ref=compile_input.environment_ref,
                )
            ],
        ),
        format_section("GLOBAL RULES", [g.prompt_text for g in library.globals]),
    ]

    for category in SELECTABLE_CATEGORIES:
        modules = sorted(by_category.get(category, ()), key=lambda m: m.id)
        blocks.append(format_section(SECTION_TITLES[category], [m.prompt_text for m in modules]))

    if compile_input.variation_ids:
        blocks.append(format_section("VARIATIONS", [str(v) for v in compile_input.variation_ids]))

    blocks.append(format_constraints(deduped_constraints))

    prompt = join_blocks(blocks)
    logger.debug(
        "Compiled prompt: modules=%d constraints=%d chars=%d",
        len(resolved),
        len(deduped_constraints),
        len(prompt),
    )

    return CompileOutput(
        prompt=prompt,
        used_module_ids=tuple(m.id for m in resolved),
        deduped_constraints=deduped_constraints,
    )
