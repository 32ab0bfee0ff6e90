import ast
from pathlib import Path


def _offending_imports(directory: Path, forbidden_prefixes: tuple[str, ...]) -> list[str]:
    offenders: list[str] = []
    for path in sorted(directory.rglob("*.py")):
        tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.name.startswith(forbidden_prefixes):
                        offenders.append(f"{path}: import {alias.name}")
            elif isinstance(node, ast.ImportFrom):
                if node.module is None:
                    continue
                if node.module.startswith(forbidden_prefixes):
                    offenders.append(f"{path}: from {node.module} import ...")
    return offenders


def test_promptkit_does_not_import_shoot_studio():
    repo_root = Path(__file__).resolve().parents[1]
    assert _offending_imports(repo_root / "promptkit", ("shoot_studio",)) == []


def test_promptkit_has_no_third_party_imports():
    repo_root = Path(__file__).resolve().parents[1]
    assert _offending_imports(repo_root / "promptkit", ("pandas", "yaml")) == []


def test_foundation_does_not_import_framework_or_app():
    repo_root = Path(__file__).resolve().parents[1]
    foundation_dir = repo_root / "shoot_studio" / "foundation"
    forbidden = ("shoot_studio.framework", "shoot_studio.app", "promptkit")
    assert _offending_imports(foundation_dir, forbidden) == []


def test_framework_does_not_import_app():
    repo_root = Path(__file__).resolve().parents[1]
    framework_dir = repo_root / "shoot_studio" / "framework"
    assert _offending_imports(framework_dir, ("shoot_studio.app",)) == []
