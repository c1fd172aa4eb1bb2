"""
Link builder - turns a data type into a ``DataLink``.

Performs:
1. Field discovery (dataclass fields, pydantic model fields, or class annotations)
2. Mode selection (automatic or manual)
3. Factory resolution (declared factory, else the zero-argument class)
4. Scalar/composite classification against the codec registry
5. Duplicate key detection

Links are cached per type unless caching is disabled.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
import types
from typing import TYPE_CHECKING, Any, ClassVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from .codecs import CodecRegistry
from .declarations import COMPOSITE_KEY, SCALAR_KEY, LinkMode, get_info
from .errors import (
    DuplicateKeyError,
    InvalidArgumentError,
    NoUsableConstructorError,
    UnsupportedTypeError,
)
from .linking import CompositeRef, DataLink, FieldRef

if TYPE_CHECKING:
    from .config import ItemDataConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeclaredField:
    """A field as declared on a data type, before classification."""

    name: str
    annotation: Any
    metadata: Mapping[str, Any]
    default: Any

    @property
    def is_public(self) -> bool:
        return not self.name.startswith("_")

    @property
    def scalar_key(self) -> str | None:
        return self.metadata.get(SCALAR_KEY)

    @property
    def composite_key(self) -> str | None:
        return self.metadata.get(COMPOSITE_KEY)


def declared_fields(cls: type) -> list[DeclaredField]:
    """
    List the fields a data type declares.

    Supports dataclasses, pydantic models and plain classes with
    annotations. ``ClassVar`` annotations are never fields.

    Raises:
        UnsupportedTypeError: If the annotations cannot be resolved
    """
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return [
            DeclaredField(
                name=name,
                annotation=info.annotation,
                metadata=info.json_schema_extra if isinstance(info.json_schema_extra, dict) else {},
                default=info.default,
            )
            for name, info in cls.model_fields.items()
        ]

    try:
        hints = get_type_hints(cls)
    except (NameError, TypeError) as e:
        raise UnsupportedTypeError(f"Cannot resolve annotations of '{cls.__name__}': {e}") from e

    if dataclasses.is_dataclass(cls):
        return [
            DeclaredField(
                name=f.name,
                annotation=hints.get(f.name, f.type),
                metadata=f.metadata,
                default=f.default,
            )
            for f in dataclasses.fields(cls)
        ]

    return [
        DeclaredField(
            name=name,
            annotation=hint,
            metadata={},
            default=getattr(cls, name, dataclasses.MISSING),
        )
        for name, hint in hints.items()
        if hint is not ClassVar and get_origin(hint) is not ClassVar
    ]


def is_data_object_type(annotation: Any) -> bool:
    """Check whether an annotation names a type that can be linked recursively."""
    if not isinstance(annotation, type):
        return False
    return (
        dataclasses.is_dataclass(annotation)
        or issubclass(annotation, BaseModel)
        or get_info(annotation) is not None
    )


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Split ``Optional[X]`` into ``(X, True)``, else return ``(annotation, False)``."""
    if get_origin(annotation) not in (Union, types.UnionType):
        return annotation, False
    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(args) != 1 or len(args) == len(get_args(annotation)):
        return annotation, False
    return args[0], True


def resolve_factory(cls: type) -> Callable[[], Any]:
    """
    Resolve the zero-argument factory for a data type.

    Raises:
        NoUsableConstructorError: If the factory cannot be called without arguments
    """
    info = get_info(cls)
    factory: Callable[[], Any] = info.factory if info and info.factory else cls

    try:
        inspect.signature(factory).bind()
    except TypeError as e:
        raise NoUsableConstructorError(
            f"'{cls.__name__}' cannot be created without arguments ({e}). "
            f"Give every field a default or declare a factory with item_data(factory=...)"
        ) from e
    except ValueError:
        # no introspectable signature (builtins); trust it
        pass

    return factory


def resolve_mode(cls: type, fields: list[DeclaredField]) -> LinkMode:
    """Pick the discovery mode: declared, else manual when any field is declared."""
    info = get_info(cls)
    if info is not None:
        return info.mode
    if any(f.scalar_key or f.composite_key for f in fields):
        return LinkMode.MANUAL
    return LinkMode.AUTO


class LinkBuilder:
    """
    Builds and caches link descriptors.

    Args:
        registry: Codec registry used to classify and convert scalar fields
        strict: Build links that raise per-field failures
        cache: Reuse links per type
    """

    def __init__(
        self,
        registry: CodecRegistry,
        *,
        strict: bool = False,
        cache: bool = True,
    ) -> None:
        if registry is None:
            raise InvalidArgumentError("A codec registry is required")
        self.registry = registry
        self.strict = strict
        self.cache_enabled = cache
        self._cache: dict[type, DataLink] = {}
        self._building: set[type] = set()

    @classmethod
    def from_config(cls, registry: CodecRegistry, config: ItemDataConfig) -> LinkBuilder:
        return cls(registry, strict=config.strict, cache=config.cache_links)

    def build(self, cls: type) -> DataLink:
        """Return the link for ``cls``, building it on first use."""
        if cls is None:
            raise InvalidArgumentError("A data type is required")
        if not isinstance(cls, type):
            raise InvalidArgumentError(f"Expected a data type, got {cls!r}")

        if self.cache_enabled and cls in self._cache:
            return self._cache[cls]

        self._building.add(cls)
        try:
            link = self._create(cls)
        finally:
            self._building.discard(cls)
        if self.cache_enabled:
            self._cache[cls] = link
        return link

    def invalidate(self, cls: type | None = None) -> None:
        """Drop cached links, for one type or all of them."""
        if cls is None:
            self._cache.clear()
        else:
            self._cache.pop(cls, None)

    def is_cached(self, cls: type) -> bool:
        return cls in self._cache

    def _create(self, cls: type) -> DataLink:
        fields = declared_fields(cls)
        mode = resolve_mode(cls, fields)
        factory = resolve_factory(cls)

        scalars: dict[str, FieldRef] = {}
        composites: dict[str, CompositeRef] = {}

        if mode == LinkMode.AUTO:
            self._collect_automatic(cls, fields, scalars, composites)
        else:
            self._collect_manual(cls, fields, scalars, composites)

        logger.debug(
            "Built %s link for %s: %d scalar(s), %d composite(s)",
            mode.value,
            cls.__name__,
            len(scalars),
            len(composites),
        )
        return DataLink(
            target=cls,
            mode=mode,
            factory=factory,
            registry=self.registry,
            scalars=scalars,
            composites=composites,
            strict=self.strict,
        )

    def _collect_automatic(
        self,
        cls: type,
        fields: list[DeclaredField],
        scalars: dict[str, FieldRef],
        composites: dict[str, CompositeRef],
    ) -> None:
        for declared in fields:
            if not declared.is_public:
                continue
            if self.registry.contains(declared.annotation):
                self._add_scalar(cls, declared.name, declared, scalars, composites)
            else:
                self._add_composite(cls, declared.name, declared, scalars, composites)

    def _collect_manual(
        self,
        cls: type,
        fields: list[DeclaredField],
        scalars: dict[str, FieldRef],
        composites: dict[str, CompositeRef],
    ) -> None:
        for declared in fields:
            if not (declared.scalar_key or declared.composite_key):
                continue
            if not declared.is_public:
                logger.warning(
                    "Ignoring link declaration on non-public field %s.%s",
                    cls.__name__,
                    declared.name,
                )
                continue

            if declared.scalar_key:
                if not self.registry.contains(declared.annotation):
                    raise UnsupportedTypeError(
                        f"Scalar field {cls.__name__}.{declared.name} has no codec "
                        f"for {declared.annotation!r}"
                    )
                self._add_scalar(cls, declared.scalar_key, declared, scalars, composites)

            if declared.composite_key:
                self._add_composite(cls, declared.composite_key, declared, scalars, composites)

    def _add_scalar(
        self,
        cls: type,
        key: str,
        declared: DeclaredField,
        scalars: dict[str, FieldRef],
        composites: dict[str, CompositeRef],
    ) -> None:
        _check_unique(cls, key, declared, scalars, composites)
        scalars[key] = FieldRef(name=declared.name, annotation=declared.annotation)

    def _add_composite(
        self,
        cls: type,
        key: str,
        declared: DeclaredField,
        scalars: dict[str, FieldRef],
        composites: dict[str, CompositeRef],
    ) -> None:
        nested_type, optional = unwrap_optional(declared.annotation)
        if not is_data_object_type(nested_type):
            raise UnsupportedTypeError(
                f"Field {cls.__name__}.{declared.name} has no codec for {nested_type!r} "
                f"and is not a data object type"
            )
        _check_unique(cls, key, declared, scalars, composites)
        # nested failures surface now; types already being built resolve on first link
        if nested_type not in self._building:
            self.build(nested_type)
        composites[key] = CompositeRef(
            name=declared.name,
            annotation=nested_type,
            resolve=lambda: self.build(nested_type),
            optional=optional or declared.default is None,
        )


def _check_unique(
    cls: type,
    key: str,
    declared: DeclaredField,
    scalars: Mapping[str, FieldRef],
    composites: Mapping[str, CompositeRef],
) -> None:
    existing = scalars.get(key) or composites.get(key)
    if existing is not None:
        raise DuplicateKeyError(
            f"Key '{key}' of {cls.__name__}.{declared.name} is already linked "
            f"to {cls.__name__}.{existing.name}"
        )
