from __future__ import annotations

import pytest

from .helpers.fakes import FakeApi


@pytest.fixture
def api():
    """
    A platform that knows alice (42) and bob (7).
    """
    return FakeApi(users={"alice": 42, "bob": 7})
