from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shoot_studio", add_help=True)
    parser.add_argument(
        "--config",
        default=None,
        help="Load this YAML config instead of config/config.yaml (+ config.local.yaml).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("compile", help="Replay the configured session and compile the prompt")
    sub.add_parser("validate", help="Replay the configured session and report validation errors")
    sub.add_parser("list-modules", help="List modules in the configured library")

    catalog = sub.add_parser("catalog", help="Write the module catalog as CSV")
    catalog.add_argument("--out", required=True, help="Destination CSV path")

    return parser


def _load_studio_config(config_path: str | None):
    from .foundation.config_io import load_config

    return load_config(config_path=config_path)


def _load_library(cfg_dict):
    from .framework.config import StudioConfig
    from .framework.library_io import load_library_from_data_dir

    cfg, _warnings = StudioConfig.from_dict(cfg_dict)
    return load_library_from_data_dir(cfg.data_dir)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)
    cfg_dict, config_meta = _load_studio_config(args.config)

    if args.command in {"compile", "validate"}:
        from .app.compile import run_session

        result = run_session(
            cfg_dict,
            config_meta=config_meta,
            final_compile=args.command == "compile",
        )
        messages = [item.message for item in result.rejected]
        messages.extend(error for error in result.state.errors if error not in messages)
        for message in messages:
            sys.stderr.write(f"error: {message}\n")
        if messages:
            return 1
        if result.state.compiled is not None:
            sys.stdout.write(result.state.compiled.prompt)
        else:
            sys.stdout.write("OK\n")
        return 0

    if args.command == "list-modules":
        from promptkit.scope import derive_meta

        library = _load_library(cfg_dict)
        for module_id in library.available():
            module = library.require(module_id)
            sys.stdout.write(f"{module.id}\t{module.category}\t{derive_meta(module).scope}\n")
        return 0

    if args.command == "catalog":
        from .framework.catalog import write_catalog_csv

        df = write_catalog_csv(_load_library(cfg_dict), args.out)
        sys.stdout.write(f"Wrote {len(df)} modules to {args.out}\n")
        return 0

    raise AssertionError(f"Unhandled command: {args.command}")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main(sys.argv[1:]))
