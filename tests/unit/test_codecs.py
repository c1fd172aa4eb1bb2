"""Tests for the value codec registry."""

from __future__ import annotations

import uuid

import pytest
from sample_items import Rarity

from itemdata.core import (
    CodecRegistry,
    DataCompound,
    DuplicateRegistrationError,
    Tag,
    TagKind,
    TagMismatchError,
    UnsupportedTypeError,
    default_registry,
)
from itemdata.core.codecs import tag_decoder, tag_encoder


def _register_rarity(registry: CodecRegistry) -> None:
    registry.register(
        Rarity,
        lambda value: Tag(kind=TagKind.STR, value=value.value),
        lambda node: Rarity(tag_decoder(TagKind.STR)(node)),
    )


class TestRegistryLookup:
    """contains() is true only for registered types."""

    def test_empty_registry_contains_nothing(self) -> None:
        registry = CodecRegistry()
        assert not registry.contains(int)
        assert len(registry) == 0

    def test_contains_after_register(self) -> None:
        registry = CodecRegistry()
        registry.register(int, tag_encoder(TagKind.INT), tag_decoder(TagKind.INT))
        assert registry.contains(int)
        assert int in registry
        assert not registry.contains(str)

    def test_types_are_matched_exactly(self, registry: CodecRegistry) -> None:
        assert registry.contains(list[int])
        assert not registry.contains(list[bytes])
        assert not registry.contains(list)

    def test_unhashable_annotation_is_not_found(self, registry: CodecRegistry) -> None:
        assert not registry.contains([int])

    def test_encode_unregistered_type_fails(self) -> None:
        with pytest.raises(UnsupportedTypeError, match="Rarity"):
            CodecRegistry().encode(Rarity, Rarity.RARE)

    def test_decode_unregistered_type_fails(self) -> None:
        with pytest.raises(UnsupportedTypeError):
            CodecRegistry().decode(Rarity, Tag(kind=TagKind.STR, value="rare"))


class TestRegistration:
    """register/unregister lifecycle."""

    def test_duplicate_registration_fails(self, registry: CodecRegistry) -> None:
        with pytest.raises(DuplicateRegistrationError, match="int"):
            registry.register(int, tag_encoder(TagKind.INT), tag_decoder(TagKind.INT))

    def test_custom_codec(self, registry: CodecRegistry) -> None:
        _register_rarity(registry)
        tag = registry.encode(Rarity, Rarity.RARE)
        assert tag == Tag(kind=TagKind.STR, value="rare")
        assert registry.decode(Rarity, tag) is Rarity.RARE

    def test_unregister(self, registry: CodecRegistry) -> None:
        registry.unregister(bytes)
        assert not registry.contains(bytes)
        with pytest.raises(UnsupportedTypeError):
            registry.unregister(bytes)

    def test_copy_is_independent(self, registry: CodecRegistry) -> None:
        derived = registry.copy()
        _register_rarity(derived)
        assert derived.contains(Rarity)
        assert not registry.contains(Rarity)

    def test_clear(self, registry: CodecRegistry) -> None:
        registry.clear()
        assert len(registry) == 0


class TestCodecFailures:
    """Exceptions raised by user codecs are reported as tag mismatches."""

    @pytest.fixture
    def rarity_registry(self) -> CodecRegistry:
        registry = CodecRegistry()
        registry.register(
            Rarity,
            lambda value: Tag(kind=TagKind.STR, value=value.value),
            lambda node: Rarity(node.value),
        )
        return registry

    def test_unknown_stored_value(self, rarity_registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError, match="legendary") as exc_info:
            rarity_registry.decode(Rarity, Tag(kind=TagKind.STR, value="legendary"))
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_unencodable_value(self, rarity_registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError, match="Rarity") as exc_info:
            rarity_registry.encode(Rarity, "rare")
        assert isinstance(exc_info.value.__cause__, AttributeError)

    def test_item_data_errors_pass_through(self, registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError, match="Expected a int tag") as exc_info:
            registry.decode(int, Tag(kind=TagKind.STR, value="x"))
        assert exc_info.value.__cause__ is None


class TestStandardCodecs:
    """Codecs installed by default_registry()."""

    @pytest.mark.parametrize(
        ("type_", "value"),
        [
            (bool, True),
            (int, -42),
            (float, 2.5),
            (str, "héllo"),
            (bytes, b"\x00\xff"),
            (uuid.UUID, uuid.UUID("12345678-1234-5678-1234-567812345678")),
            (list[int], [1, 2, 3]),
            (list[float], [0.5, 1.0]),
            (list[str], ["a", "b"]),
        ],
    )
    def test_decode_inverts_encode(self, type_: object, value: object) -> None:
        registry = default_registry()
        assert registry.decode(type_, registry.encode(type_, value)) == value

    def test_float_accepts_int_values(self, registry: CodecRegistry) -> None:
        assert registry.encode(float, 3) == Tag(kind=TagKind.FLOAT, value=3.0)

    def test_encode_wrong_value_type(self, registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError):
            registry.encode(int, "five")

    def test_encode_bool_as_int_fails(self, registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError):
            registry.encode(int, True)

    def test_decode_wrong_kind(self, registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError, match="Expected a int tag, found str"):
            registry.decode(int, Tag(kind=TagKind.STR, value="5"))

    def test_decode_sub_tree_as_scalar(self, registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError, match="sub-tree"):
            registry.decode(int, DataCompound())

    def test_list_encoder_rejects_mixed_items(self, registry: CodecRegistry) -> None:
        with pytest.raises(TagMismatchError):
            registry.encode(list[int], [1, "two"])
