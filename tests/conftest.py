from __future__ import annotations

from typing import Callable

import pytest

from doclets.diagnostics import Reporter
from doclets.tags.builtin import build_dictionaries
from doclets.tags.dictionary import DictionaryHandle
from tests._fixtures.walker import WalkerBuilder


@pytest.fixture
def reporter() -> Reporter:
    """Provide a fresh diagnostic channel whose records tests can inspect."""
    return Reporter()


@pytest.fixture
def handle() -> DictionaryHandle:
    """Provide a handle on the default merged jsdoc+closure dictionary."""
    return DictionaryHandle(build_dictionaries())


@pytest.fixture
def walker() -> Callable[..., WalkerBuilder]:
    """Provide a factory for walker event streams."""
    return WalkerBuilder
