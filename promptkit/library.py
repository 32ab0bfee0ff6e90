from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Literal, Mapping, get_args

from promptkit.errors import DuplicateModuleId, UnknownModuleId

Category = Literal[
    "facial_pose",
    "anatomy_pose",
    "apparel_textile",
    "product",
    "cinematography",
    "global_rules",
]
SelectableCategory = Literal[
    "facial_pose",
    "anatomy_pose",
    "apparel_textile",
    "product",
    "cinematography",
]

ALL_CATEGORIES: tuple[str, ...] = get_args(Category)
# Canonical order used for compiled sections and flattened selections.
SELECTABLE_CATEGORIES: tuple[str, ...] = get_args(SelectableCategory)
GLOBAL_RULES_CATEGORY = "global_rules"


@dataclass(frozen=True)
class Module:
    id: str
    category: Category
    label: str
    prompt_text: str
    constraints: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise TypeError("Module.id must be a non-empty string")
        if self.category not in ALL_CATEGORIES:
            raise ValueError(
                f"Module.category must be one of: {', '.join(ALL_CATEGORIES)} "
                f"(got {self.category!r}, id={self.id})"
            )
        if not isinstance(self.label, str):
            raise TypeError(f"Module.label must be a string (id={self.id})")
        if not isinstance(self.prompt_text, str):
            raise TypeError(f"Module.prompt_text must be a string (id={self.id})")
        if isinstance(self.constraints, str):
            raise TypeError(f"Module.constraints must be a sequence of strings (id={self.id})")
        constraints = tuple(self.constraints)
        for idx, constraint in enumerate(constraints):
            if not isinstance(constraint, str):
                raise TypeError(
                    f"Module.constraints[{idx}] must be a string "
                    f"(id={self.id}, type={type(constraint).__name__})"
                )
        object.__setattr__(self, "constraints", constraints)

    @property
    def is_global(self) -> bool:
        return self.category == GLOBAL_RULES_CATEGORY


@dataclass(frozen=True)
class Library:
    """Read-only module lookup plus the always-included global rules (in load order)."""

    by_id: Mapping[str, Module]
    globals: tuple[Module, ...] = field(default=())

    @classmethod
    def from_modules(cls, modules: Iterable[Module]) -> "Library":
        entries: dict[str, Module] = {}
        globals_: list[Module] = []
        for module in modules:
            if module.id in entries:
                raise DuplicateModuleId(module.id)
            entries[module.id] = module
            if module.is_global:
                globals_.append(module)
        return cls(by_id=MappingProxyType(entries), globals=tuple(globals_))

    def __contains__(self, module_id: object) -> bool:
        return module_id in self.by_id

    def __len__(self) -> int:
        return len(self.by_id)

    def get(self, module_id: str) -> Module | None:
        return self.by_id.get(module_id)

    def require(self, module_id: str) -> Module:
        module = self.by_id.get(module_id)
        if module is None:
            raise UnknownModuleId(module_id)
        return module

    def available(self) -> tuple[str, ...]:
        return tuple(sorted(self.by_id.keys()))
