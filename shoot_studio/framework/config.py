from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from promptkit.scope import REF_SLOTS
from shoot_studio.foundation.config_io import find_repo_root


def parse_bool(value: Any, path: str) -> bool:
    """
    Strict boolean parsing to avoid bool('false') footguns.

    Accepts True/False, 0/1, and the strings true/false/1/0/yes/no (case-insensitive).
    """

    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"Invalid boolean for {path}: {value!r}")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"true", "1", "yes"}:
            return True
        if normalized in {"false", "0", "no"}:
            return False
    raise ValueError(f"Invalid boolean for {path}: {value!r}")


def parse_optional_str(value: Any, path: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Invalid config type for {path}: expected string, got {type(value).__name__}")
    return value.strip() or None


def parse_str_list(value: Any, path: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, (list, tuple)):
        raise ValueError(f"Invalid config type for {path}: expected a list of strings")
    items: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ValueError(f"Invalid config value for {path}[{idx}]: must be a non-empty string")
        items.append(item.strip())
    return tuple(items)


@dataclass(frozen=True)
class SessionConfig:
    refs: Mapping[str, str | None] = field(default_factory=dict)
    modules: tuple[str, ...] = ()
    variations: tuple[str, ...] = ()


@dataclass(frozen=True)
class StudioConfig:
    data_dir: str
    log_dir: str
    session: SessionConfig
    write_prompt: bool = True
    write_record: bool = True

    @staticmethod
    def from_dict(cfg: Mapping[str, Any]) -> tuple["StudioConfig", list[str]]:
        """
        Parse and validate configuration, returning (StudioConfig, warnings).

        Raises:
            ValueError: if keys are invalid, or unknown keys are present with `strict: true`.
        """

        if not isinstance(cfg, Mapping):
            raise ValueError("Config must be a mapping")

        warnings: list[str] = []
        repo_root: str | None = None

        strict = parse_bool(cfg.get("strict", False), "strict")

        schema: Mapping[str, Any] = {
            "strict": None,
            "library": {"data_dir": None},
            "session": {
                "refs": {slot: None for slot in REF_SLOTS},
                "modules": None,
                "variations": None,
            },
            "output": {"log_dir": None, "write_prompt": None, "write_record": None},
        }

        def collect_unknown_keys(mapping: Any, subschema: Mapping[str, Any], *, prefix: str) -> list[str]:
            if not isinstance(mapping, Mapping):
                return []
            unknown: list[str] = []
            for key, value in mapping.items():
                key_path = f"{prefix}.{key}" if prefix else str(key)
                if key not in subschema:
                    unknown.append(key_path)
                elif isinstance(subschema[key], Mapping):
                    unknown.extend(collect_unknown_keys(value, subschema[key], prefix=key_path))
            return unknown

        unknown_keys = sorted(set(collect_unknown_keys(cfg, schema, prefix="")))
        if unknown_keys:
            if strict:
                raise ValueError("Unknown config keys: " + ", ".join(unknown_keys))
            warnings.extend(f"Unknown config key: {key}" for key in unknown_keys)

        def normalize_path(value: str) -> str:
            expanded = os.path.expandvars(os.path.expanduser(value.strip()))
            if not os.path.isabs(expanded):
                nonlocal repo_root
                if repo_root is None:
                    repo_root = find_repo_root()
                expanded = os.path.join(repo_root, expanded)
            return os.path.abspath(expanded)

        def get_mapping(path: str) -> Mapping[str, Any]:
            value = cfg.get(path)
            if value is None:
                return {}
            if not isinstance(value, Mapping):
                raise ValueError(f"Invalid config type for {path}: expected a mapping")
            return value

        library_cfg = get_mapping("library")
        session_cfg = get_mapping("session")
        output_cfg = get_mapping("output")

        data_dir = parse_optional_str(library_cfg.get("data_dir"), "library.data_dir") or "data"
        log_dir = parse_optional_str(output_cfg.get("log_dir"), "output.log_dir") or "logs"

        raw_refs = session_cfg.get("refs") or {}
        if not isinstance(raw_refs, Mapping):
            raise ValueError("Invalid config type for session.refs: expected a mapping")
        refs = {
            slot: parse_optional_str(raw_refs.get(slot), f"session.refs.{slot}") for slot in REF_SLOTS
        }

        modules = parse_str_list(session_cfg.get("modules"), "session.modules")
        duplicates = sorted({m for m in modules if modules.count(m) > 1})
        if duplicates:
            warnings.append(
                "session.modules lists the same id more than once: " + ", ".join(duplicates)
            )

        return (
            StudioConfig(
                data_dir=normalize_path(data_dir),
                log_dir=normalize_path(log_dir),
                session=SessionConfig(
                    refs=refs,
                    modules=modules,
                    variations=parse_str_list(session_cfg.get("variations"), "session.variations"),
                ),
                write_prompt=parse_bool(output_cfg.get("write_prompt", True), "output.write_prompt"),
                write_record=parse_bool(output_cfg.get("write_record", True), "output.write_record"),
            ),
            warnings,
        )
