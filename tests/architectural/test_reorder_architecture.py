"""Architectural tests for the reorder package.

Static, file/AST-based checks: the core stays free of transport and
framework imports, reference data caches are owned objects rather than
module globals, and every module declares its public surface.

These tests never import or execute application code; they only read
files under the project root.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, List, Set

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_DIR = PROJECT_ROOT / "reorder"
LOGIC_DIR = PACKAGE_DIR / "logic"

# Transport and framework libraries the core must not depend on
CORE_FORBIDDEN_IMPORTS = {"httpx", "fastapi", "sqlalchemy", "requests"}


# --------------------
# Helper utilities
# --------------------


def py_files_under(root: Path) -> List[Path]:
    return sorted(p for p in root.rglob("*.py") if "__pycache__" not in p.parts)


def _parse(path: Path) -> ast.Module:
    try:
        return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    except SyntaxError as exc:
        pytest.fail(f"Failed to parse {path}: {exc}")


def _imported_roots(tree: ast.Module) -> Set[str]:
    roots: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            roots.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            roots.add(node.module.split(".")[0])
    return roots


def _module_level_assign_names(tree: ast.Module) -> Iterable[tuple[str, ast.AST]]:
    for node in tree.body:
        if isinstance(node, ast.Assign):
            for target in node.targets:
                if isinstance(target, ast.Name):
                    yield target.id, node.value
        elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name) and node.value is not None:
            yield node.target.id, node.value


# --------------------
# Tests
# --------------------


def test_package_layout_exists():
    for rel in ("logic/sequence_list.py", "logic/reorder_coordinator.py", "http/persistence.py", "config.py"):
        assert (PACKAGE_DIR / rel).is_file(), f"missing reorder/{rel}"


@pytest.mark.parametrize("path", py_files_under(LOGIC_DIR), ids=lambda p: p.name)
def test_core_does_not_import_transport_or_frameworks(path):
    forbidden = _imported_roots(_parse(path)) & CORE_FORBIDDEN_IMPORTS
    assert not forbidden, f"{path.name} imports {sorted(forbidden)}"


def test_models_do_not_import_transport():
    for path in py_files_under(PACKAGE_DIR / "models"):
        assert "httpx" not in _imported_roots(_parse(path)), path.name


@pytest.mark.parametrize("path", py_files_under(PACKAGE_DIR), ids=lambda p: str(p.relative_to(PACKAGE_DIR)))
def test_every_module_declares_all(path):
    names = {name for name, _ in _module_level_assign_names(_parse(path))}
    assert "__all__" in names, f"{path.relative_to(PROJECT_ROOT)} has no __all__"


def test_catalog_has_no_module_level_mutable_caches():
    for path in py_files_under(PACKAGE_DIR / "catalog"):
        for name, value in _module_level_assign_names(_parse(path)):
            if name == "__all__":
                continue
            assert not isinstance(value, (ast.List, ast.Dict, ast.Set)), f"{path.name}: module-level {name}"


def test_error_codes_are_unique():
    tree = _parse(PACKAGE_DIR / "errors.py")
    codes: List[str] = []
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        for stmt in node.body:
            if (
                isinstance(stmt, ast.Assign)
                and any(isinstance(t, ast.Name) and t.id == "code" for t in stmt.targets)
                and isinstance(stmt.value, ast.Constant)
            ):
                codes.append(stmt.value.value)
    assert len(codes) >= 6
    assert len(codes) == len(set(codes))
    assert all(code.startswith("REORDER_") for code in codes)


def test_no_bare_except_in_package():
    for path in py_files_under(PACKAGE_DIR):
        for node in ast.walk(_parse(path)):
            if isinstance(node, ast.ExceptHandler):
                assert node.type is not None, f"bare except in {path.relative_to(PROJECT_ROOT)}:{node.lineno}"


def test_persistence_port_never_retries():
    source = (PACKAGE_DIR / "http" / "persistence.py").read_text(encoding="utf-8")
    tree = ast.parse(source)
    commit = next(
        node
        for node in ast.walk(tree)
        if isinstance(node, ast.AsyncFunctionDef) and node.name == "commit_sequence"
    )
    loops = [node for node in ast.walk(commit) if isinstance(node, (ast.For, ast.While, ast.AsyncFor))]
    assert loops == [], "commit_sequence must send a single request"
