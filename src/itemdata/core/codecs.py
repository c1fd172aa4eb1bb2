"""
Value codec registry.

Maps a field's static type to a pair of functions converting between Python
values and tree tags.  The link builder consults the registry to decide
whether a field is a scalar (has a codec) or a composite (nested data object).

The registry is a plain value: build one, pass it to ``LinkBuilder`` or
``ItemDataHelper``, and discard it when done.  Registration is not
synchronized; populate the registry before building any links from it.

Usage:
    registry = default_registry()
    registry.register(Rarity, encode_rarity, decode_rarity)
    tag = registry.encode(int, 5)
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from .errors import (
    DuplicateRegistrationError,
    ItemDataError,
    TagMismatchError,
    UnsupportedTypeError,
)
from .tree import Tag, TagKind

logger = logging.getLogger(__name__)

Encoder = Callable[[Any], Tag]
Decoder = Callable[[Any], Any]


@dataclass(frozen=True)
class Codec:
    """Encode/decode pair registered for one type."""

    type: Any
    encode: Encoder
    decode: Decoder


def _type_name(type_: Any) -> str:
    return getattr(type_, "__name__", None) or repr(type_)


@dataclass
class CodecRegistry:
    """Registry of value codecs keyed by static type.

    Types are matched exactly: a codec for ``int`` does not cover ``bool``,
    and ``list[int]`` is distinct from ``list[str]``.
    """

    _codecs: dict[Any, Codec] = field(default_factory=dict)

    def register(self, type_: Any, encode: Encoder, decode: Decoder) -> None:
        """Register a codec for ``type_``."""
        if type_ in self._codecs:
            raise DuplicateRegistrationError(
                f"A codec for '{_type_name(type_)}' is already registered"
            )
        self._codecs[type_] = Codec(type=type_, encode=encode, decode=decode)
        logger.debug("Registered codec for %s", _type_name(type_))

    def unregister(self, type_: Any) -> None:
        """Remove the codec for ``type_``."""
        if type_ not in self._codecs:
            raise UnsupportedTypeError(f"No codec registered for '{_type_name(type_)}'")
        del self._codecs[type_]

    def contains(self, type_: Any) -> bool:
        try:
            return type_ in self._codecs
        except TypeError:
            # unhashable annotations can never be registered
            return False

    def get(self, type_: Any) -> Codec:
        """Look up the codec for ``type_``."""
        if not self.contains(type_):
            raise UnsupportedTypeError(f"No codec registered for '{_type_name(type_)}'")
        return self._codecs[type_]

    def encode(self, type_: Any, value: Any) -> Tag:
        """Encode ``value`` with the codec for ``type_``.

        Raises:
            UnsupportedTypeError: If no codec is registered for ``type_``
            TagMismatchError: If the codec rejects the value
        """
        codec = self.get(type_)
        try:
            return codec.encode(value)
        except ItemDataError:
            raise
        except Exception as e:
            raise TagMismatchError(
                f"Codec for '{_type_name(type_)}' cannot encode {type(value).__name__}: {e}"
            ) from e

    def decode(self, type_: Any, node: Any) -> Any:
        """Decode ``node`` with the codec for ``type_``; codec errors become tag mismatches."""
        codec = self.get(type_)
        try:
            return codec.decode(node)
        except ItemDataError:
            raise
        except Exception as e:
            raise TagMismatchError(
                f"Codec for '{_type_name(type_)}' cannot decode {node!r}: {e}"
            ) from e

    def clear(self) -> None:
        self._codecs.clear()

    def copy(self) -> CodecRegistry:
        """Return an independent registry with the same codecs."""
        return CodecRegistry(_codecs=dict(self._codecs))

    @property
    def types(self) -> list[Any]:
        return list(self._codecs)

    def __contains__(self, type_: object) -> bool:
        return self.contains(type_)

    def __len__(self) -> int:
        return len(self._codecs)


# =============================================================================
# Standard codecs
# =============================================================================


def tag_encoder(kind: TagKind, convert: Callable[[Any], Any] | None = None) -> Encoder:
    """
    Build an encoder producing tags of ``kind``.

    Args:
        kind: Tag kind to produce
        convert: Optional conversion applied to the value first

    Returns:
        Encoder raising ``TagMismatchError`` for unrepresentable values
    """

    def encode(value: Any) -> Tag:
        try:
            return Tag(kind=kind, value=convert(value) if convert else value)
        except (ValidationError, TypeError, ValueError) as e:
            raise TagMismatchError(
                f"Cannot encode {type(value).__name__} as a {kind.value} tag"
            ) from e

    return encode


def tag_decoder(kind: TagKind) -> Decoder:
    """Build a decoder accepting only tags of ``kind``."""

    def decode(node: Any) -> Any:
        if not isinstance(node, Tag):
            raise TagMismatchError(f"Expected a {kind.value} tag, found a sub-tree")
        if node.kind != kind:
            raise TagMismatchError(f"Expected a {kind.value} tag, found {node.kind.value}")
        return node.value

    return decode


def list_encoder(item_kind: TagKind, convert: Callable[[Any], Any] | None = None) -> Encoder:
    """Build an encoder for homogeneous lists of ``item_kind`` tags."""
    encode_item = tag_encoder(item_kind, convert)

    def encode(value: Any) -> Tag:
        if not isinstance(value, list | tuple):
            raise TagMismatchError(f"Cannot encode {type(value).__name__} as a list tag")
        return Tag(kind=TagKind.LIST, value=tuple(encode_item(item) for item in value))

    return encode


def list_decoder(item_kind: TagKind) -> Decoder:
    """Build a decoder for homogeneous lists of ``item_kind`` tags."""
    decode_list = tag_decoder(TagKind.LIST)
    decode_item = tag_decoder(item_kind)

    def decode(node: Any) -> list[Any]:
        return [decode_item(item) for item in decode_list(node)]

    return decode


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("bool is not a float")
    return float(value)


def register_defaults(registry: CodecRegistry) -> CodecRegistry:
    """Register codecs for the built-in scalar types."""
    registry.register(bool, tag_encoder(TagKind.BOOL), tag_decoder(TagKind.BOOL))
    registry.register(int, tag_encoder(TagKind.INT), tag_decoder(TagKind.INT))
    registry.register(float, tag_encoder(TagKind.FLOAT, _to_float), tag_decoder(TagKind.FLOAT))
    registry.register(str, tag_encoder(TagKind.STR), tag_decoder(TagKind.STR))
    registry.register(bytes, tag_encoder(TagKind.BYTES), tag_decoder(TagKind.BYTES))
    registry.register(uuid.UUID, tag_encoder(TagKind.UUID), tag_decoder(TagKind.UUID))
    registry.register(list[int], list_encoder(TagKind.INT), list_decoder(TagKind.INT))
    registry.register(
        list[float], list_encoder(TagKind.FLOAT, _to_float), list_decoder(TagKind.FLOAT)
    )
    registry.register(list[str], list_encoder(TagKind.STR), list_decoder(TagKind.STR))
    return registry


def default_registry() -> CodecRegistry:
    """Create a new registry populated with the standard codecs."""
    return register_defaults(CodecRegistry())
