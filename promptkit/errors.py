from __future__ import annotations


class PromptKitError(ValueError):
    """Base class for hard (raised) prompt assembly errors."""


class DuplicateModuleId(PromptKitError):
    def __init__(self, module_id: str) -> None:
        super().__init__(f"Duplicate module id in library: '{module_id}'")
        self.module_id = module_id


class DuplicateSelectedId(PromptKitError):
    def __init__(self, module_id: str) -> None:
        super().__init__(f"Duplicate module id selected: '{module_id}'")
        self.module_id = module_id


class UnknownModuleId(PromptKitError):
    def __init__(self, module_id: str) -> None:
        super().__init__(f"Unknown module id: '{module_id}'")
        self.module_id = module_id


class MissingReference(PromptKitError):
    def __init__(self, kind: str) -> None:
        marker = f"{kind.upper()} REFERENCE IMAGE"
        super().__init__(
            f"{kind.capitalize()} reference required: a selected module mentions '{marker}'."
        )
        self.kind = kind
