from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_ENV_VAR = "SHOOT_STUDIO_CONFIG"
BASE_CONFIG = Path("config") / "config.yaml"
LOCAL_OVERLAY = Path("config") / "config.local.yaml"

# Sections a local overlay edits key by key. Anything else, including the
# session.modules and session.variations lists, is replaced wholesale.
MERGED_SECTIONS = frozenset({"library", "session", "session.refs", "output"})


def find_repo_root(start: str | os.PathLike[str] | None = None) -> str:
    here = Path(start or os.getcwd()).resolve()
    if here.is_file():
        here = here.parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").is_file() or (candidate / ".git").exists():
            return str(candidate)
    raise FileNotFoundError(f"Cannot locate repo root above {here} (no pyproject.toml or .git)")


def read_yaml_mapping(path: str | os.PathLike[str]) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ValueError(f"Config file must contain a YAML mapping: {path}")
    return dict(payload)


def apply_local_overlay(
    base: Mapping[str, Any], overlay: Mapping[str, Any], *, prefix: str = ""
) -> dict[str, Any]:
    """
    Apply `config.local.yaml` on top of the base config.

    `library`, `session`, `session.refs` and `output` merge key by key, so a local
    file can swap one reference image without restating the others. A null value
    clears the key. All other values, lists included, replace the base value.
    """

    merged: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        key_path = f"{prefix}.{key}" if prefix else str(key)
        current = merged.get(key)
        if key_path in MERGED_SECTIONS and value is not None:
            if not isinstance(value, Mapping):
                raise ValueError(
                    f"{LOCAL_OVERLAY.name}: {key_path} must be a mapping, got {type(value).__name__}"
                )
            if isinstance(current, Mapping):
                value = apply_local_overlay(current, value, prefix=key_path)
        merged[key] = value
    return merged


def load_config(
    *,
    config_path: str | None = None,
    env_var: str = DEFAULT_CONFIG_ENV_VAR,
    repo_root: str | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """
    Load the studio config, returning (cfg, meta).

    An explicit `config_path`, then the `env_var` environment variable, names a single
    file loaded as-is. Otherwise `config/config.yaml` under the repo root is loaded and
    `config/config.local.yaml` is applied on top when present.
    """

    single = (config_path or "").strip() or None
    mode = "explicit"
    if single is None and env_var:
        single = os.environ.get(env_var, "").strip() or None
        mode = "env"

    if single:
        resolved = os.path.abspath(os.path.expandvars(os.path.expanduser(single)))
        return read_yaml_mapping(resolved), {
            "mode": mode,
            "paths": [resolved],
            "env_var": env_var,
            "repo_root": None,
        }

    root = Path(repo_root or find_repo_root())
    base_path = root / BASE_CONFIG
    if not base_path.is_file():
        raise FileNotFoundError(f"Missing base config file: {base_path}")

    cfg = read_yaml_mapping(base_path)
    paths = [str(base_path)]
    overlay_path = root / LOCAL_OVERLAY
    if overlay_path.is_file():
        cfg = apply_local_overlay(cfg, read_yaml_mapping(overlay_path))
        paths.append(str(overlay_path))

    return cfg, {
        "mode": "base+local" if len(paths) > 1 else "base",
        "paths": paths,
        "env_var": env_var,
        "repo_root": str(root),
    }
