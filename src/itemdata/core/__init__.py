"""Core item data functionality: tagged tree, codec registry, link builder, synchronization helper."""

from .codecs import Codec, CodecRegistry, default_registry, register_defaults
from .config import ItemDataConfig, config_from_env, configure_logging, load_config
from .declarations import (
    LinkMode,
    category_of,
    composite,
    composite_key,
    item_data,
    scalar,
    scalar_key,
)
from .errors import (
    ConfigError,
    DuplicateKeyError,
    DuplicateRegistrationError,
    FieldAccessDeniedError,
    FieldLinkError,
    InvalidArgumentError,
    ItemDataError,
    NoUsableConstructorError,
    NullFieldValueError,
    TagMismatchError,
    UnsupportedTypeError,
)
from .helper import ItemDataHelper, SelfLinkedData
from .link_builder import LinkBuilder
from .linking import CompositeRef, DataLink, FieldRef, LinkFailure, LinkReport
from .tree import DataCompound, HostItem, ItemStack, Tag, TagKind, TreeNode

__all__ = [
    # Tree
    "DataCompound",
    "HostItem",
    "ItemStack",
    "Tag",
    "TagKind",
    "TreeNode",
    # Codecs
    "Codec",
    "CodecRegistry",
    "default_registry",
    "register_defaults",
    # Declarations
    "LinkMode",
    "category_of",
    "composite",
    "composite_key",
    "item_data",
    "scalar",
    "scalar_key",
    # Linking
    "CompositeRef",
    "DataLink",
    "FieldRef",
    "LinkBuilder",
    "LinkFailure",
    "LinkReport",
    # Helper
    "ItemDataHelper",
    "SelfLinkedData",
    # Config
    "ItemDataConfig",
    "config_from_env",
    "configure_logging",
    "load_config",
    # Errors
    "ConfigError",
    "DuplicateKeyError",
    "DuplicateRegistrationError",
    "FieldAccessDeniedError",
    "FieldLinkError",
    "InvalidArgumentError",
    "ItemDataError",
    "NoUsableConstructorError",
    "NullFieldValueError",
    "TagMismatchError",
    "UnsupportedTypeError",
]
