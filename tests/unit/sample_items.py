"""Data types shared by the unit tests."""

from __future__ import annotations

import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import ClassVar

from pydantic import BaseModel, Field

from itemdata.core import (
    DataCompound,
    LinkMode,
    Tag,
    TagKind,
    composite,
    composite_key,
    item_data,
    scalar,
    scalar_key,
)


@item_data("stats")
@dataclass
class Stats:
    count: int = scalar("count", default=0)
    label: str = scalar("label", default="")


@item_data("stats")
@dataclass
class StatsCountOnly:
    """Same category as Stats, mapping only ``count``."""

    count: int = scalar("count", default=0)
    label: str = "not linked"


@item_data("flags", mode=LinkMode.AUTO)
@dataclass
class Flags:
    enchanted: bool = False
    charges: int = 3
    weight: float = 1.5
    name: str = "blade"
    _scratch: int = 0


@item_data("everything", mode=LinkMode.AUTO)
@dataclass
class Everything:
    flag: bool = False
    number: int = 0
    ratio: float = 0.0
    text: str = ""
    blob: bytes = b""
    ident: uuid.UUID = field(default_factory=lambda: uuid.UUID(int=0))
    numbers: list[int] = field(default_factory=list)
    ratios: list[float] = field(default_factory=list)
    words: list[str] = field(default_factory=list)


@dataclass
class Owner:
    name: str = "nobody"
    level: int = 1


@item_data("provenance")
@dataclass
class Provenance:
    origin: str = scalar("origin", default="forge")
    owner: Owner = composite("owner", default_factory=Owner)


@item_data("loadout", mode=LinkMode.AUTO)
@dataclass
class Loadout:
    slots: int = 2
    owner: Owner = field(default_factory=Owner)


@item_data(mode=LinkMode.MANUAL)
@dataclass
class Chain:
    value: int = scalar("value", default=0)
    next: Chain | None = composite("next", default=None)


@item_data("renamed")
@dataclass
class Renamed:
    display_name: str = scalar("name", default="unnamed")
    uses: int = scalar("uses_left", default=10)
    note: str = "kept out of the tree"


@item_data("sealed", mode=LinkMode.AUTO)
class Sealed:
    """``seal`` is readable but not writable."""

    count: int
    seal: str

    def __init__(self) -> None:
        self.count = 0
        self._seal = "wax"

    @property
    def seal(self) -> str:
        return self._seal


@item_data("charges")
class Charges(BaseModel):
    current: int = Field(3, json_schema_extra=scalar_key("current"))
    maximum: int = Field(5, json_schema_extra=scalar_key("max"))
    owner: Owner = Field(default_factory=Owner, json_schema_extra=composite_key("owner"))


class Durability:
    """Reads and writes its own tree."""

    category: ClassVar[str] = "durability"

    def __init__(self) -> None:
        self.value = 100

    def read_from(self, node: DataCompound) -> None:
        self.value = node.get("value").value

    def write_to(self, node: DataCompound) -> None:
        node.put("value", Tag(kind=TagKind.INT, value=self.value))


@dataclass
class NeedsArgs:
    count: int


@item_data("needs", factory=lambda: Prebuilt(count=7))
@dataclass
class Prebuilt:
    count: int = scalar("count")


@dataclass
class Uncategorized:
    count: int = 0


@dataclass
class Inner:
    x: int


@item_data("outer", mode=LinkMode.AUTO)
@dataclass
class Outer:
    """Builds on its own, but its nested type needs constructor arguments."""

    slots: int = 2
    inner: Inner = field(default_factory=lambda: Inner(1))


@item_data("appraisal", mode=LinkMode.AUTO)
@dataclass
class Appraisal:
    value: int = 0
    appraiser: Owner | None = None


class Rarity(Enum):
    COMMON = "common"
    RARE = "rare"


@item_data("gem", mode=LinkMode.AUTO)
@dataclass
class Gem:
    count: int = 1
    rarity: Rarity = Rarity.COMMON
