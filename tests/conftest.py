"""Shared pytest configuration for wren tests."""

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
