"""
Link descriptors: the compiled mapping between a data type's fields and tree keys.

A ``DataLink`` is built once per type by ``LinkBuilder`` and is immutable
afterwards.  It moves values in both directions:

- ``forward_link``: tree -> instance (decode each key into its field)
- ``backward_link``: instance -> tree (encode each field under its key)

Per-field failures never abort a link pass.  They are logged, recorded in the
returned ``LinkReport`` and the remaining fields are still processed.  With
``strict=True`` the first failure is raised instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from .codecs import CodecRegistry
from .declarations import LinkMode
from .errors import (
    FieldAccessDeniedError,
    FieldLinkError,
    NullFieldValueError,
    TagMismatchError,
    make_field_error,
)
from .tree import Tag, TreeNode

logger = logging.getLogger(__name__)

NULL_VALUE_MESSAGE = "Linked fields must not be None when synchronizing"


@dataclass(frozen=True)
class FieldRef:
    """Accessor for one attribute of a data object."""

    name: str
    annotation: Any

    def read(self, instance: Any) -> Any:
        try:
            return getattr(instance, self.name)
        except AttributeError as e:
            raise FieldAccessDeniedError(f"Field is not readable: {e}") from e

    def write(self, instance: Any, value: Any) -> None:
        try:
            setattr(instance, self.name, value)
        except (AttributeError, TypeError, ValidationError) as e:
            # frozen dataclasses raise AttributeError, frozen pydantic models ValidationError
            raise FieldAccessDeniedError(f"Field is not writable: {e}") from e


@dataclass(frozen=True)
class CompositeRef(FieldRef):
    """Accessor for a nested data object field.

    ``resolve`` returns the nested type's link; it is called lazily so that
    self-referencing types can be built.  An ``optional`` composite (annotated
    ``X | None`` or defaulting to ``None``) holding ``None`` is absent, not an error.
    """

    resolve: Callable[[], DataLink] = field(compare=False, repr=False, kw_only=True)
    optional: bool = field(default=False, kw_only=True)


@dataclass(frozen=True)
class LinkFailure:
    """A field that could not be linked."""

    path: str
    error: FieldLinkError


@dataclass
class LinkReport:
    """Outcome of a forward or backward link pass."""

    linked: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)
    failures: list[LinkFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def failed_paths(self) -> list[str]:
        return [f.path for f in self.failures]

    def merge(self, other: LinkReport, prefix: str) -> None:
        """Fold a nested report in, prefixing its paths with ``prefix.``."""
        self.linked.extend(f"{prefix}.{path}" for path in other.linked)
        self.missing.extend(f"{prefix}.{path}" for path in other.missing)
        self.failures.extend(
            LinkFailure(path=f"{prefix}.{f.path}", error=f.error) for f in other.failures
        )


@dataclass(frozen=True, eq=False)
class DataLink:
    """
    Immutable link descriptor for one data type.

    Attributes:
        target: The data type this link describes
        mode: Discovery mode the link was built with
        factory: Zero-argument callable producing new instances
        registry: Codec registry used for scalar fields
        scalars: Tree key -> scalar field accessor
        composites: Tree key -> nested data object accessor
        strict: Raise per-field failures instead of recording them
    """

    target: type
    mode: LinkMode
    factory: Callable[[], Any]
    registry: CodecRegistry
    scalars: Mapping[str, FieldRef] = field(default_factory=dict)
    composites: Mapping[str, CompositeRef] = field(default_factory=dict)
    strict: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "scalars", MappingProxyType(dict(self.scalars)))
        object.__setattr__(self, "composites", MappingProxyType(dict(self.composites)))

    @property
    def keys(self) -> list[str]:
        return [*self.scalars, *self.composites]

    def new_instance(self) -> Any:
        return self.factory()

    def forward_link(self, tree: TreeNode, instance: Any) -> LinkReport:
        """Populate ``instance`` from ``tree``."""
        report = LinkReport()

        for key, ref in self.scalars.items():
            node = tree.get(key)
            if node is None:
                logger.debug("No value under '%s' for %s, keeping default", key, self._name)
                report.missing.append(key)
                continue
            try:
                ref.write(instance, self.registry.decode(ref.annotation, node))
            except FieldLinkError as e:
                self._fail(report, "forward", key, ref, e)
                continue
            report.linked.append(key)

        for key, ref in self.composites.items():
            node = tree.get(key)
            if node is None:
                logger.debug("No sub-tree under '%s' for %s, keeping default", key, self._name)
                report.missing.append(key)
                continue
            try:
                if isinstance(node, Tag):
                    raise TagMismatchError(f"Expected a sub-tree, found a {node.kind.value} tag")
                nested_link = ref.resolve()
                nested = nested_link.new_instance()
                report.merge(nested_link.forward_link(node, nested), key)
                ref.write(instance, nested)
            except FieldLinkError as e:
                self._fail(report, "forward", key, ref, e)
                continue
            report.linked.append(key)

        return report

    def backward_link(self, tree: TreeNode, instance: Any) -> LinkReport:
        """Write ``instance`` into ``tree``. Existing keys are overwritten, not removed."""
        report = LinkReport()

        for key, ref in self.scalars.items():
            try:
                value = self._read_required(ref, instance)
                tree.put(key, self.registry.encode(ref.annotation, value))
            except FieldLinkError as e:
                self._fail(report, "backward", key, ref, e)
                continue
            report.linked.append(key)

        for key, ref in self.composites.items():
            try:
                value = ref.read(instance)
                if value is None and ref.optional:
                    logger.debug("Optional '%s' of %s is None, leaving it out", key, self._name)
                    report.missing.append(key)
                    continue
                if value is None:
                    raise NullFieldValueError(NULL_VALUE_MESSAGE)
                nested_link = ref.resolve()
                child = tree.create_child()
                report.merge(nested_link.backward_link(child, value), key)
                tree.put(key, child)
            except FieldLinkError as e:
                self._fail(report, "backward", key, ref, e)
                continue
            report.linked.append(key)

        return report

    @property
    def _name(self) -> str:
        return self.target.__name__

    @staticmethod
    def _read_required(ref: FieldRef, instance: Any) -> Any:
        value = ref.read(instance)
        if value is None:
            raise NullFieldValueError(NULL_VALUE_MESSAGE)
        return value

    def _fail(
        self,
        report: LinkReport,
        direction: str,
        key: str,
        ref: FieldRef,
        error: FieldLinkError,
    ) -> None:
        if error.context is None:
            located = make_field_error(type(error), error.message, key, ref.name, self.target)
            located.__cause__ = error.__cause__ or error
            error = located
        if self.strict:
            raise error
        logger.error("Could not %s-link %s", direction, error)
        report.failures.append(LinkFailure(path=key, error=error))
