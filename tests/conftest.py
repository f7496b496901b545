from __future__ import annotations

from collections.abc import Iterator

import pytest

from versioned_json import SchemaRegistry, reset_registry


@pytest.fixture
def registry() -> SchemaRegistry:
    """Fresh, isolated registry for each test."""
    return SchemaRegistry()


@pytest.fixture(autouse=True)
def _clean_default_registry() -> Iterator[None]:
    """Keep the process-wide registry empty between tests."""
    reset_registry()
    yield
    reset_registry()
