"""
itemdata - typed data objects persisted in the tagged trees of item stacks.

Link dataclasses or pydantic models to a host item's tree without writing
serialization code, then fetch, mutate and synchronize them.
"""

from __future__ import annotations

from ._version import get_version
from .core import (
    CodecRegistry,
    DataCompound,
    ItemDataConfig,
    ItemDataError,
    ItemDataHelper,
    ItemStack,
    LinkBuilder,
    LinkMode,
    Tag,
    TagKind,
    composite,
    composite_key,
    default_registry,
    item_data,
    scalar,
    scalar_key,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "CodecRegistry",
    "DataCompound",
    "ItemDataConfig",
    "ItemDataError",
    "ItemDataHelper",
    "ItemStack",
    "LinkBuilder",
    "LinkMode",
    "Tag",
    "TagKind",
    "composite",
    "composite_key",
    "default_registry",
    "item_data",
    "scalar",
    "scalar_key",
]
