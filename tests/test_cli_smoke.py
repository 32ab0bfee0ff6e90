from pathlib import Path

import pandas as pd

from shoot_studio import cli

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


def _write_config(tmp_path, *, character: str | None, modules: list[str]) -> Path:
    lines = [
        "library:",
        f"  data_dir: '{DATA_DIR.as_posix()}'",
        "session:",
        "  refs:",
        f"    character: {character if character else 'null'}",
        "  modules:",
        *[f"    - {module_id}" for module_id in modules],
        "output:",
        f"  log_dir: '{(tmp_path / 'logs').as_posix()}'",
        "",
    ]
    path = tmp_path / "config.yaml"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def test_cli_compile_prints_prompt(tmp_path, capsys):
    config_path = _write_config(tmp_path, character="char_ref", modules=["facial_pose_primary_moods"])

    rc = cli.main(["--config", str(config_path), "compile"])
    assert rc == 0

    out = capsys.readouterr().out
    assert out.startswith("IDENTITY & REFERENCES\n")
    assert "FACIAL POSES" in out


def test_cli_compile_reports_errors(tmp_path, capsys):
    config_path = _write_config(tmp_path, character=None, modules=["facial_pose_primary_moods"])

    rc = cli.main(["--config", str(config_path), "compile"])
    assert rc == 1
    assert "error: Missing character reference." in capsys.readouterr().err


def test_cli_validate_ok(tmp_path, capsys):
    config_path = _write_config(tmp_path, character="c", modules=["anatomy_pose_fashion_stances"])

    rc = cli.main(["--config", str(config_path), "validate"])
    assert rc == 0
    assert capsys.readouterr().out == "OK\n"


def test_cli_list_modules(tmp_path, capsys):
    config_path = _write_config(tmp_path, character=None, modules=[])

    rc = cli.main(["--config", str(config_path), "list-modules"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "anatomy_pose_hand_gestures\tanatomy_pose\thands_only" in out


def test_cli_catalog_writes_csv(tmp_path, capsys):
    config_path = _write_config(tmp_path, character=None, modules=[])
    out_path = tmp_path / "catalog.csv"

    rc = cli.main(["--config", str(config_path), "catalog", "--out", str(out_path)])
    assert rc == 0
    assert "Wrote" in capsys.readouterr().out
    assert "facial_pose_primary_moods" in pd.read_csv(out_path)["id"].tolist()


def test_cli_compile_fails_on_unknown_module(tmp_path, capsys):
    config_path = _write_config(
        tmp_path, character="char_ref", modules=["typo_module_id", "facial_pose_primary_moods"]
    )

    rc = cli.main(["--config", str(config_path), "compile"])
    assert rc == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "error: Unknown module id: 'typo_module_id'" in captured.err


def test_cli_validate_fails_on_global_module_selection(tmp_path, capsys):
    config_path = _write_config(tmp_path, character="c", modules=["global_rules_identity_lock"])

    rc = cli.main(["--config", str(config_path), "validate"])
    assert rc == 1
    assert "error: Unsupported module category for selection: 'global_rules'" in capsys.readouterr().err
