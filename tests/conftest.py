"""Shared pytest fixtures for itemdata tests."""

import pytest

from itemdata.core import CodecRegistry, ItemDataHelper, ItemStack, LinkBuilder, default_registry


@pytest.fixture
def registry() -> CodecRegistry:
    """Return a fresh registry with the standard codecs."""
    return default_registry()


@pytest.fixture
def builder(registry: CodecRegistry) -> LinkBuilder:
    """Return a link builder over the standard registry."""
    return LinkBuilder(registry)


@pytest.fixture
def helper(registry: CodecRegistry) -> ItemDataHelper:
    """Return a helper over the standard registry."""
    return ItemDataHelper(registry)


@pytest.fixture
def stack() -> ItemStack:
    """Return a never-touched item stack."""
    return ItemStack(item="iron_sword")
