"""
Item data helper - fetch, initialize, and synchronize data on host items.

Lifecycle of one category on one host item:

    Uninitialized --get--> Initialized --mutate--> Dirty --synchronize--> Initialized

``get`` always returns a fresh instance reflecting the tree at call time.
Changes made to that instance are lost unless passed back through
``synchronize`` (or made inside ``use``, which synchronizes afterwards).

Usage:
    helper = ItemDataHelper(default_registry())
    stats = helper.get(Stats, stack)
    helper.use(stack, stats, lambda s: setattr(s, "count", s.count + 1))
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar, runtime_checkable

from .codecs import CodecRegistry, default_registry
from .config import ItemDataConfig
from .declarations import category_of
from .errors import InvalidArgumentError
from .link_builder import LinkBuilder, resolve_factory
from .linking import DataLink, LinkReport
from .tree import HostItem, TreeNode

logger = logging.getLogger(__name__)

T = TypeVar("T")


@runtime_checkable
class SelfLinkedData(Protocol):
    """Data type that reads and writes its own tree, bypassing link descriptors."""

    category: str

    def read_from(self, node: TreeNode) -> None: ...

    def write_to(self, node: TreeNode) -> None: ...


def is_self_linked(cls: type) -> bool:
    return callable(getattr(cls, "read_from", None)) and callable(getattr(cls, "write_to", None))


class ItemDataHelper:
    """
    Entry point for working with data stored on host items.

    Args:
        registry: Codec registry; defaults to a new ``default_registry()``
        config: Link settings (strict mode, caching)
        builder: Explicit link builder; overrides ``registry`` and ``config``
    """

    def __init__(
        self,
        registry: CodecRegistry | None = None,
        *,
        config: ItemDataConfig | None = None,
        builder: LinkBuilder | None = None,
    ) -> None:
        self.config = config or ItemDataConfig()
        if builder is None:
            builder = LinkBuilder.from_config(registry or default_registry(), self.config)
        self.builder = builder

    @property
    def registry(self) -> CodecRegistry:
        return self.builder.registry

    def link_for(self, data_type: type) -> DataLink:
        """Return the link descriptor used for ``data_type``."""
        _require(data_type, "data_type")
        return self.builder.build(data_type)

    def get(self, data_type: type[T], stack: HostItem) -> T:
        """
        Retrieve the data of ``data_type`` attached to ``stack``.

        The category sub-tree is created and filled with the type's defaults
        on first access.

        Args:
            data_type: The data type to read
            stack: The host item holding the data

        Returns:
            A new instance populated from the tree
        """
        instance, _ = self.load(data_type, stack)
        return instance

    def load(self, data_type: type[T], stack: HostItem) -> tuple[T, LinkReport]:
        """Like ``get``, also returning the report of the forward link."""
        _require(data_type, "data_type")
        _require(stack, "stack")

        category = self._category(data_type)

        if is_self_linked(data_type):
            factory = resolve_factory(data_type)
            tree = stack.get_or_create_subtree(category)
            if tree.is_empty():
                tree.clear()
                factory().write_to(tree)
            instance = factory()
            instance.read_from(tree)
            return instance, LinkReport()

        # build before touching the tree so an unlinkable type leaves it as it was
        link = self.builder.build(data_type)
        tree = stack.get_or_create_subtree(category)
        if tree.is_empty():
            # first access: remove stray partial state, write the defaults
            tree.clear()
            defaults = link.backward_link(tree, link.new_instance())
            logger.debug(
                "Initialized '%s' with defaults (%d key(s))",
                category,
                len(defaults.linked),
            )

        instance = link.new_instance()
        report = link.forward_link(tree, instance)
        return instance, report

    def synchronize(self, stack: HostItem, data: Any) -> LinkReport:
        """
        Write every change made to ``data`` back to ``stack``.

        The category sub-tree is cleared first, so keys not produced by the
        data type are dropped.

        Args:
            stack: The host item holding the data
            data: The modified data instance

        Returns:
            Report of the backward link
        """
        _require(stack, "stack")
        _require(data, "data")

        data_type = type(data)
        category = self._category(data_type)

        if is_self_linked(data_type):
            tree = stack.get_or_create_subtree(category)
            tree.clear()
            data.write_to(tree)
            return LinkReport()

        link = self.builder.build(data_type)
        tree = stack.get_or_create_subtree(category)
        tree.clear()
        return link.backward_link(tree, data)

    def use(self, stack: HostItem, data: T, usage: Callable[[T], Any]) -> LinkReport:
        """
        Apply ``usage`` to ``data`` and synchronize the result.

        Args:
            stack: The host item holding the data
            data: The data instance to modify
            usage: Callable making the changes

        Returns:
            Report of the backward link
        """
        _require(stack, "stack")
        _require(data, "data")
        _require(usage, "usage")
        if not callable(usage):
            raise InvalidArgumentError(f"usage must be callable, got {usage!r}")

        usage(data)
        return self.synchronize(stack, data)

    @staticmethod
    def _category(data_type: type) -> str:
        category = category_of(data_type)
        if category is None:
            raise InvalidArgumentError(
                f"'{data_type.__name__}' has no category. "
                f"Declare one with item_data('...') or a 'category' class attribute"
            )
        return category


def _require(value: Any, name: str) -> None:
    if value is None:
        raise InvalidArgumentError(f"{name} is required")
