"""
Tagged key-value tree used to persist item data.

The linking layer only talks to trees and host items through the
``TreeNode`` and ``HostItem`` protocols.  This module also provides the
reference in-memory implementation:

- ``Tag``: an immutable, typed leaf value
- ``DataCompound``: a nestable mapping of string keys to tags or compounds
- ``ItemStack``: a host item owning a root compound, one sub-tree per category

Usage:
    stack = ItemStack("sword")
    tree = stack.get_or_create_subtree("stats")
    tree.put("count", Tag(kind=TagKind.INT, value=5))
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

logger = logging.getLogger(__name__)


class TagKind(str, Enum):
    """Kinds of leaf values a tree can hold."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STR = "str"
    BYTES = "bytes"
    UUID = "uuid"
    LIST = "list"  # tuple of tags


_KIND_TYPES: dict[TagKind, type] = {
    TagKind.BOOL: bool,
    TagKind.INT: int,
    TagKind.FLOAT: float,
    TagKind.STR: str,
    TagKind.BYTES: bytes,
    TagKind.UUID: uuid.UUID,
}


class Tag(BaseModel):
    """
    A typed leaf value stored in a tree.

    Examples:
        - Tag(kind=INT, value=5)
        - Tag(kind=LIST, value=(Tag(kind=STR, value="a"),))
    """

    kind: TagKind
    value: Any

    model_config = ConfigDict(frozen=True)

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: Any, info: ValidationInfo) -> Any:
        """Ensure the value matches the declared kind."""
        kind = info.data.get("kind")
        if kind is None:
            return v

        if kind == TagKind.LIST:
            if not isinstance(v, list | tuple):
                raise ValueError(f"list tag requires a sequence, got {type(v).__name__}")
            for item in v:
                if not isinstance(item, Tag):
                    raise ValueError(f"list tag items must be tags, got {type(item).__name__}")
            return tuple(v)

        expected = _KIND_TYPES[kind]
        # bool is an int subclass but never a valid int tag
        if isinstance(v, bool) and expected is not bool:
            raise ValueError(f"{kind.value} tag cannot hold a bool")
        if not isinstance(v, expected):
            raise ValueError(f"{kind.value} tag cannot hold {type(v).__name__}")
        return v

    def to_python(self) -> Any:
        """Return the plain Python value, unwrapping list items."""
        if self.kind == TagKind.LIST:
            return [item.to_python() for item in self.value]
        return self.value


@runtime_checkable
class TreeNode(Protocol):
    """A nestable, schema-less key-value node."""

    def is_empty(self) -> bool: ...

    def get(self, key: str) -> Any: ...

    def put(self, key: str, value: Any) -> None: ...

    def clear(self) -> None: ...

    def create_child(self) -> TreeNode: ...


@runtime_checkable
class HostItem(Protocol):
    """An item that owns a tree and hands out named sub-trees."""

    def get_or_create_subtree(self, category: str) -> TreeNode: ...


class DataCompound:
    """
    In-memory tree node mapping string keys to tags or nested compounds.

    Key order is preserved but carries no meaning.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Tag | DataCompound] | None = None) -> None:
        self._entries: dict[str, Tag | DataCompound] = {}
        if entries:
            for key, value in entries.items():
                self.put(key, value)

    def is_empty(self) -> bool:
        return not self._entries

    def get(self, key: str) -> Tag | DataCompound | None:
        return self._entries.get(key)

    def put(self, key: str, value: Tag | DataCompound) -> None:
        if not isinstance(key, str) or not key:
            raise TypeError(f"Tree keys must be non-empty strings, got {key!r}")
        if not isinstance(value, Tag | DataCompound):
            raise TypeError(f"Tree values must be tags or compounds, got {type(value).__name__}")
        self._entries[key] = value

    def remove(self, key: str) -> Tag | DataCompound | None:
        return self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def create_child(self) -> DataCompound:
        return DataCompound()

    def get_or_create_compound(self, key: str) -> DataCompound:
        """Return the compound stored at ``key``, creating it when absent.

        A leaf tag stored under the same key is replaced.
        """
        existing = self._entries.get(key)
        if isinstance(existing, DataCompound):
            return existing
        if existing is not None:
            logger.debug("Replacing %s tag at '%s' with a compound", existing.kind.value, key)
        compound = DataCompound()
        self.put(key, compound)
        return compound

    def keys(self) -> list[str]:
        return list(self._entries)

    def to_dict(self) -> dict[str, Any]:
        """Convert the tree to nested plain Python values."""
        return {
            key: value.to_dict() if isinstance(value, DataCompound) else value.to_python()
            for key, value in self._entries.items()
        }

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DataCompound):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"DataCompound({self._entries!r})"


@dataclass
class ItemStack:
    """
    A host item carrying a root tree.

    Each data category lives in its own sub-tree directly under the root.
    """

    item: str
    count: int = 1
    nbt: DataCompound = field(default_factory=DataCompound)

    def get_or_create_subtree(self, category: str) -> DataCompound:
        return self.nbt.get_or_create_compound(category)

    def get_subtree(self, category: str) -> DataCompound | None:
        node = self.nbt.get(category)
        return node if isinstance(node, DataCompound) else None

    def remove_subtree(self, category: str) -> None:
        self.nbt.remove(category)
