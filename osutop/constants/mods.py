from __future__ import annotations

from enum import IntFlag
from typing import Any
from typing import Iterable
from typing import Iterator


def chunks(source: str, size: int) -> Iterator[str]:
    for idx in range(0, len(source), size):
        yield source[idx : idx + size]


class Mods(IntFlag):
    NOMOD = 0
    NOFAIL = 1 << 0
    EASY = 1 << 1
    TOUCHDEVICE = 1 << 2
    HIDDEN = 1 << 3
    HARDROCK = 1 << 4
    SUDDENDEATH = 1 << 5
    DOUBLETIME = 1 << 6
    RELAX = 1 << 7
    HALFTIME = 1 << 8
    NIGHTCORE = (1 << 9) | DOUBLETIME
    FLASHLIGHT = 1 << 10
    SPUNOUT = 1 << 12
    PERFECT = (1 << 14) | SUDDENDEATH
    FADEIN = 1 << 20
    SCOREV2 = 1 << 29
    MIRROR = 1 << 30

    def __repr__(self) -> str:
        return self.acronyms

    def __str__(self) -> str:
        return self.acronyms

    def has(self, mods: Mods) -> bool:
        return int(self) & int(mods) == int(mods)

    @property
    def acronyms(self) -> str:
        if not self:
            return "NM"

        res = ""
        for flags in ENCODE_ORDER:
            # aliases come first in each group, their constituents are skipped
            for flag in flags:
                if self.has(flag):
                    res += MOD_ACRONYMS[flag]
                    break

        return res

    @classmethod
    def from_acronym(cls, acronym: str) -> Mods:
        """Strictly decode a single acronym, e.g. `"hd"`."""
        try:
            return ACRONYM_MODS[acronym.upper()]
        except KeyError:
            raise ValueError(f"{acronym!r} is not a valid mods acronym") from None

    @classmethod
    def from_acronyms(cls, acronyms: Iterable[str]) -> Mods:
        mods = cls.NOMOD
        for acronym in acronyms:
            mods |= cls.from_acronym(acronym)

        return mods

    @classmethod
    def from_string(cls, mod_str: str) -> Mods:
        """Leniently decode a concatenated string like `"HDDTHR"`.

        Unknown two-letter chunks (and a dangling odd character) are ignored.
        """
        mods = cls.NOMOD
        for acronym in chunks(mod_str.upper(), 2):
            mods |= ACRONYM_MODS.get(acronym, cls.NOMOD)

        return mods

    @classmethod
    def from_wire(cls, value: Any) -> Mods:
        """Decode the `mods` field of an API object.

        The api sends either a list of acronyms or a single string,
        so we inspect the shape rather than assume one.
        """
        if isinstance(value, cls):
            return value

        if isinstance(value, (list, tuple)):
            if not all(isinstance(acronym, str) for acronym in value):
                raise ValueError(f"mods list must only contain strings: {value!r}")

            return cls.from_acronyms(value)

        if isinstance(value, str):
            return cls.from_string(value)

        raise ValueError(f"unsupported mods value: {value!r}")


MOD_ACRONYMS: dict[Mods, str] = {
    Mods.NOFAIL: "NF",
    Mods.EASY: "EZ",
    Mods.TOUCHDEVICE: "TD",
    Mods.HIDDEN: "HD",
    Mods.HARDROCK: "HR",
    Mods.SUDDENDEATH: "SD",
    Mods.DOUBLETIME: "DT",
    Mods.RELAX: "RX",
    Mods.HALFTIME: "HT",
    Mods.NIGHTCORE: "NC",
    Mods.FLASHLIGHT: "FL",
    Mods.SPUNOUT: "SO",
    Mods.PERFECT: "PF",
    Mods.FADEIN: "FD",
    Mods.SCOREV2: "V2",
    Mods.MIRROR: "MR",
}

ACRONYM_MODS: dict[str, Mods] = {
    "NM": Mods.NOMOD,
    **{acronym: mod for mod, acronym in MOD_ACRONYMS.items()},
}

ENCODE_ORDER: tuple[tuple[Mods, ...], ...] = (
    (Mods.NOFAIL,),
    (Mods.EASY,),
    (Mods.TOUCHDEVICE,),
    (Mods.HIDDEN,),
    (Mods.NIGHTCORE, Mods.DOUBLETIME),
    (Mods.HALFTIME,),
    (Mods.FLASHLIGHT,),
    (Mods.HARDROCK,),
    (Mods.PERFECT, Mods.SUDDENDEATH),
    (Mods.SPUNOUT,),
    (Mods.RELAX,),
    (Mods.FADEIN,),
    (Mods.SCOREV2,),
    (Mods.MIRROR,),
)
