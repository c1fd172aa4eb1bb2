"""
Declarations that mark a class as item data and map its fields to tree keys.

Automatic mode links every public field under its own name:

    @item_data("flags", mode=LinkMode.AUTO)
    @dataclass
    class Flags:
        enchanted: bool = False
        charges: int = 3

Manual mode links only declared fields, under the declared keys:

    @item_data("stats")
    @dataclass
    class Stats:
        count: int = scalar("count", default=0)
        label: str = scalar("display_label", default="")
        owner: Owner = composite("owner", default_factory=Owner)

Pydantic models declare keys through ``json_schema_extra``:

    class Stats(BaseModel):
        count: int = Field(0, json_schema_extra=scalar_key("count"))
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeVar

from .errors import InvalidArgumentError

T = TypeVar("T", bound=type)

# Field metadata keys
SCALAR_KEY = "itemdata.scalar"
COMPOSITE_KEY = "itemdata.composite"

# Class attribute holding ItemDataInfo
INFO_ATTR = "__item_data__"


class LinkMode(StrEnum):
    """How a data type's fields are discovered."""

    AUTO = "auto"  # every public field, keyed by its name
    MANUAL = "manual"  # only declared fields, keyed by the declaration


@dataclass(frozen=True)
class ItemDataInfo:
    """Linking metadata attached to a class by ``item_data``."""

    category: str | None
    mode: LinkMode
    factory: Callable[[], Any] | None = None


def item_data(
    category: str | None = None,
    *,
    mode: LinkMode = LinkMode.MANUAL,
    factory: Callable[[], Any] | None = None,
) -> Callable[[T], T]:
    """
    Class decorator marking a type as linkable item data.

    Args:
        category: Sub-tree name on the host item. Optional for types that
            are only used as nested composites.
        mode: Field discovery mode
        factory: Zero-argument callable creating instances. Defaults to the
            class itself.

    Returns:
        Decorator returning the class unchanged apart from the metadata
    """
    if category is not None and (not isinstance(category, str) or not category):
        raise InvalidArgumentError(f"Category must be a non-empty string, got {category!r}")
    if factory is not None and not callable(factory):
        raise InvalidArgumentError(f"Factory must be callable, got {factory!r}")

    info = ItemDataInfo(category=category, mode=LinkMode(mode), factory=factory)

    def decorate(cls: T) -> T:
        setattr(cls, INFO_ATTR, info)
        return cls

    return decorate


def get_info(cls: type) -> ItemDataInfo | None:
    """Return the ``item_data`` metadata declared on ``cls`` itself."""
    info = cls.__dict__.get(INFO_ATTR)
    return info if isinstance(info, ItemDataInfo) else None


def category_of(cls: type) -> str | None:
    """Resolve a type's category from ``item_data`` or a ``category`` attribute."""
    info = get_info(cls)
    if info is not None and info.category:
        return info.category
    category = getattr(cls, "category", None)
    return category if isinstance(category, str) and category else None


def scalar(
    key: str,
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field linked as a scalar under ``key``."""
    _check_key(key)
    metadata = {**kwargs.pop("metadata", {}), SCALAR_KEY: key}
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


def composite(
    key: str,
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **kwargs: Any,
) -> Any:
    """Declare a dataclass field linked as a nested data object under ``key``."""
    _check_key(key)
    metadata = {**kwargs.pop("metadata", {}), COMPOSITE_KEY: key}
    return dataclasses.field(
        default=default, default_factory=default_factory, metadata=metadata, **kwargs
    )


def scalar_key(key: str) -> dict[str, str]:
    """Scalar declaration for pydantic ``Field(json_schema_extra=...)``."""
    _check_key(key)
    return {SCALAR_KEY: key}


def composite_key(key: str) -> dict[str, str]:
    """Composite declaration for pydantic ``Field(json_schema_extra=...)``."""
    _check_key(key)
    return {COMPOSITE_KEY: key}


def _check_key(key: str) -> None:
    if not isinstance(key, str) or not key:
        raise InvalidArgumentError(f"Tree key must be a non-empty string, got {key!r}")
