from __future__ import annotations

import ast
import importlib.util

import pytest

from conftest import ROOT_DIR
from scanloot.db.collections import ACHIEVEMENTS, KEY_FIELDS, TRADE_ITEM_REFS

SCRIPTS_DIR = ROOT_DIR / "scripts"


def _load(name: str):
    module_spec = importlib.util.spec_from_file_location(f"scripts_{name}", SCRIPTS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module


@pytest.mark.parametrize("name", ["seed", "create_tables"])
def test_scripts_carry_a_module_docstring(name):
    tree = ast.parse((SCRIPTS_DIR / f"{name}.py").read_text(encoding="utf-8"))
    doc = ast.get_docstring(tree)
    assert doc and "python scripts/" in doc


def test_table_definitions_cover_every_collection():
    create_tables = _load("create_tables")
    defs = {c: create_tables.table_definition(c) for c in KEY_FIELDS}

    assert defs[ACHIEVEMENTS]["KeySchema"] == [{"AttributeName": "id", "KeyType": "HASH"}]
    assert "GlobalSecondaryIndexes" not in defs[ACHIEVEMENTS]
    assert [k["KeyType"] for k in defs[TRADE_ITEM_REFS]["KeySchema"]] == ["HASH", "RANGE"]
