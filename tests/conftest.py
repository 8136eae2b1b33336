from __future__ import annotations

import copy
import json
import sys
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_SRC = (_ROOT / "src").as_posix()
if _SRC not in sys.path:
    sys.path.insert(0, _SRC)

EXAMPLES_DIR = _ROOT / "examples"


def _load_example(name: str) -> dict:
    return json.loads((EXAMPLES_DIR / name).read_text(encoding="utf-8"))


@pytest.fixture
def examples_dir() -> Path:
    return EXAMPLES_DIR


@pytest.fixture
def my_report() -> dict:
    return _load_example("my-report.json")


@pytest.fixture
def fleet_report() -> dict:
    return copy.deepcopy(_load_example("fleet-overview.json"))
