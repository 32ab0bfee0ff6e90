from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from promptkit.library import Library, Module

logger = logging.getLogger(__name__)


def module_from_record(record: Any, *, source: str) -> Module:
    if not isinstance(record, Mapping):
        raise ValueError(f"{source} must be a JSON object (got {type(record).__name__})")

    module_id = record.get("id")
    if not isinstance(module_id, str) or not module_id.strip():
        raise ValueError(f"{source} is missing a non-empty 'id'")

    constraints = record.get("constraints")
    if constraints is None:
        constraints = []
    if not isinstance(constraints, list):
        raise ValueError(f"{source} (id={module_id}) 'constraints' must be a list of strings")

    try:
        return Module(
            id=module_id,
            category=record.get("category"),
            label=record.get("label", ""),
            prompt_text=record.get("prompt_text", ""),
            constraints=tuple(constraints),
        )
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{source}: {exc}") from exc


def load_modules_from_file(path: str) -> list[Module]:
    name = os.path.basename(path)
    try:
        with open(path, "r", encoding="utf-8") as handle:
            parsed = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {name}: {exc}") from exc

    if not isinstance(parsed, list):
        raise ValueError(f"Expected array in {name}")
    return [module_from_record(item, source=f"{name}[{idx}]") for idx, item in enumerate(parsed)]


def load_library_from_data_dir(data_dir: str) -> Library:
    """
    Load every `*.json` file in `data_dir` (sorted by filename) into a Library.

    Raises:
        FileNotFoundError: if the directory does not exist.
        ValueError: on malformed files or records.
        DuplicateModuleId: if an id repeats anywhere across the merged files.
    """

    if not os.path.isdir(data_dir):
        raise FileNotFoundError(f"Module data directory not found: {data_dir}")

    files = sorted(f for f in os.listdir(data_dir) if f.endswith(".json"))
    modules: list[Module] = []
    for filename in files:
        modules.extend(load_modules_from_file(os.path.join(data_dir, filename)))

    library = Library.from_modules(modules)
    logger.info(
        "Loaded %d modules (%d global rules) from %d files in %s",
        len(library),
        len(library.globals),
        len(files),
        data_dir,
    )
    return library
