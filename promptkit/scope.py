"""Reference requirements and mutual-exclusion scope, derived from module text.

Requirements and scope are not schema fields. They are inferred from literal marker
phrases inside `prompt_text`, so rewording a module's text changes how it validates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, get_args

from promptkit.library import Module

RefSlot = Literal["character", "product", "environment"]
Scope = Literal["full_body", "face_only", "hands_only", "environment_only", "mixed"]

REF_SLOTS: tuple[str, ...] = get_args(RefSlot)

REFERENCE_MARKERS: dict[str, str] = {
    "character": "CHARACTER REFERENCE IMAGE",
    "product": "PRODUCT REFERENCE IMAGE",
    "environment": "ENVIRONMENT REFERENCE IMAGE",
}

_HANDS_ONLY_MARKER = "HANDS ONLY"
_FACIAL_CLOSE_UP_MARKER = "facial close-up"


@dataclass(frozen=True)
class ReferenceRequirements:
    character: bool = False
    product: bool = False
    environment: bool = False

    def requires(self, slot: str) -> bool:
        if slot not in REF_SLOTS:
            raise ValueError(f"Unknown reference slot: {slot!r}")
        return bool(getattr(self, slot))

    def required_slots(self) -> tuple[str, ...]:
        return tuple(slot for slot in REF_SLOTS if getattr(self, slot))


@dataclass(frozen=True)
class ModuleMeta:
    requires: ReferenceRequirements
    scope: Scope
    category: str


def derive_requirements(prompt_text: str) -> ReferenceRequirements:
    text = prompt_text or ""
    return ReferenceRequirements(
        character=REFERENCE_MARKERS["character"] in text,
        product=REFERENCE_MARKERS["product"] in text,
        environment=REFERENCE_MARKERS["environment"] in text,
    )


def derive_meta(module: Module) -> ModuleMeta:
    """Derive requirements + scope for a module. First matching scope rule wins."""

    text = module.prompt_text or ""
    requires = derive_requirements(text)

    scope: Scope
    if _HANDS_ONLY_MARKER in text.upper():
        scope = "hands_only"
    elif requires.environment and not requires.character and not requires.product:
        scope = "environment_only"
    elif module.category == "facial_pose":
        scope = "face_only"
    elif _FACIAL_CLOSE_UP_MARKER in text.lower():
        scope = "face_only"
    else:
        scope = "full_body"

    return ModuleMeta(requires=requires, scope=scope, category=module.category)
