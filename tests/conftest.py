from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is on sys.path so `import scanloot.*` works in tests.
ROOT_DIR = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT_DIR))

from scanloot.db import store  # noqa: E402
from scanloot.db.memory import MemoryStore  # noqa: E402
from scanloot.repositories import catalog_repo  # noqa: E402


class ScriptedRng:
    """Returns the given values in order, then repeats the last one."""

    def __init__(self, *values: float):
        self._values = list(values)
        self._i = 0

    def random(self) -> float:
        v = self._values[min(self._i, len(self._values) - 1)]
        self._i += 1
        return v


@pytest.fixture(autouse=True)
def mem_store(monkeypatch):
    s = MemoryStore()
    monkeypatch.setattr(store, "get_store", lambda: s)
    catalog_repo.clear_cache()
    yield s
    catalog_repo.clear_cache()
