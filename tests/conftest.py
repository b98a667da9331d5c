from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import List

import pytest

BASE_DIR = Path(__file__).resolve().parent.parent
SRC_DIR = (BASE_DIR / "src").resolve()

for _path in (BASE_DIR, SRC_DIR):
    if str(_path) not in sys.path:
        sys.path.append(str(_path))

# Variables that change what the interpreter writes to stderr.
_OUTPUT_ENV = ("NO_COLOR", "ZPY_NO_COLOR", "ZPY_DEBUG_PY_TRACE")


@pytest.fixture(autouse=True)
def _stable_output_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _OUTPUT_ENV:
        monkeypatch.delenv(name, raising=False)


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Refuse to run when two parametrized cases collapse to one node id."""
    del session
    del config

    counts = Counter(item.nodeid for item in items)
    duplicates = sorted(nodeid for nodeid, n in counts.items() if n > 1)
    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in duplicates)
    raise pytest.UsageError(f"Duplicate pytest nodeids detected during collection:\n{lines}")
