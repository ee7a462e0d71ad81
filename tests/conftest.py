from __future__ import annotations

import io
import sys
from typing import Dict, Iterator, List

import pytest

from smalljs.types import JSObject


@pytest.fixture
def out() -> io.StringIO:
    """Output stream handed to interpret/run in place of stdout."""
    return io.StringIO()


@pytest.fixture
def env() -> JSObject:
    """Fresh parentless environment for evaluating hand-built trees."""
    return JSObject.new_env(None)


@pytest.fixture
def recursion_limit() -> Iterator[int]:
    """Record the recursion limit and check a run leaves it untouched."""
    before = sys.getrecursionlimit()
    yield before
    assert sys.getrecursionlimit() == before


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: List[pytest.Item],
) -> None:
    """Fail fast if pytest ever generates duplicate smalljs scenario IDs."""
    del session
    del config

    seen: Dict[str, int] = {}
    duplicates: List[str] = []
    for item in items:
        nodeid = item.nodeid
        if nodeid in seen:
            duplicates.append(nodeid)
            continue
        seen[nodeid] = 1

    if not duplicates:
        return

    lines = "\n".join(f"- {nodeid}" for nodeid in sorted(set(duplicates)))
    raise pytest.UsageError(
        "Duplicate smalljs test ids detected during collection:\n" f"{lines}"
    )
