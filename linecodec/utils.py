from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple
import numpy as np

from .errors import InvalidBitString

Bits = Tuple[int, ...]


class EncodingScheme(str, Enum):
    NRZ_L = "NRZ-L"
    NRZ_I = "NRZ-I"
    MANCHESTER = "Manchester"
    DIFF_MANCHESTER = "Differential Manchester"
    AMI = "AMI"

    @classmethod
    def parse(cls, name: "EncodingScheme | str") -> "EncodingScheme":
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for scheme in cls:
            if scheme.value.lower() == key:
                return scheme
        if key in _SCHEME_ALIASES:
            return cls(_SCHEME_ALIASES[key])
        raise ValueError(f"Unknown scheme: {name}")


# Names the simulator UI used for the same schemes
_SCHEME_ALIASES = {
    "nrzl": "NRZ-L",
    "nrzi": "NRZ-I",
    "diffmanchester": "Differential Manchester",
    "diff-manchester": "Differential Manchester",
    "bipolar-ami": "AMI",
}


class ScrambleMode(str, Enum):
    NONE = "none"
    B8ZS = "B8ZS"
    HDB3 = "HDB3"

    @classmethod
    def parse(cls, name: "ScrambleMode | str | None") -> "ScrambleMode":
        if name is None:
            return cls.NONE
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for mode in cls:
            if mode.value.lower() == key:
                return mode
        raise ValueError(f"Unknown scramble mode: {name}")


@dataclass(frozen=True)
class PcmConfig:
    bits_per_sample: int = 8
    lo: float = -1.0
    hi: float = 1.0

    def __post_init__(self):
        if not int(self.bits_per_sample) > 0:
            raise ValueError("bits_per_sample must be positive.")
        if not float(self.hi) > float(self.lo):
            raise ValueError("Invalid quantizer range (hi must be > lo).")

    @property
    def max_code(self) -> int:
        return (1 << int(self.bits_per_sample)) - 1


@dataclass(frozen=True)
class DeltaConfig:
    step: float = 0.1

    def __post_init__(self):
        if not float(self.step) > 0:
            raise ValueError("DM step must be positive.")


@dataclass(frozen=True)
class Substitution:
    pos: int                  # bit index where the zero run starts
    kind: str                 # "B8ZS" or "HDB3"
    rule: str                 # "000VB0VB", "B00V" or "000V"
    pattern: Tuple[int, ...]  # levels emitted in place of the zeros


@dataclass(frozen=True, eq=False)
class Waveform:
    """
    Piecewise-constant line signal.

    Every segment is stored as two points (start, end) with the same level, so an
    edge shows up as two consecutive points sharing one time value. Both arrays are
    read-only once built.
    """
    t: np.ndarray
    levels: np.ndarray
    scheme: EncodingScheme
    scramble: ScrambleMode = ScrambleMode.NONE
    substitutions: Tuple[Substitution, ...] = ()

    def __post_init__(self):
        t = np.array(self.t, dtype=float)
        levels = np.array(self.levels, dtype=float)
        if t.shape != levels.shape:
            raise ValueError("Time and level arrays must have the same length.")
        if t.size > 1 and np.any(np.diff(t) < 0):
            raise ValueError("Waveform time must be non-decreasing.")
        t.setflags(write=False)
        levels.setflags(write=False)
        object.__setattr__(self, "t", t)
        object.__setattr__(self, "levels", levels)
        object.__setattr__(self, "scheme", EncodingScheme.parse(self.scheme))
        object.__setattr__(self, "scramble", ScrambleMode.parse(self.scramble))
        object.__setattr__(self, "substitutions", tuple(self.substitutions))

    def __len__(self) -> int:
        return int(self.t.size)

    @property
    def duration(self) -> float:
        return float(self.t[-1]) if self.t.size else 0.0

    @property
    def n_intervals(self) -> int:
        return int(round(self.duration))

    def points(self) -> Iterator[Tuple[float, float]]:
        for x, y in zip(self.t.tolist(), self.levels.tolist()):
            yield x, y

    def level_at(self, tx: float) -> float:
        # Level of the first point whose time is >= tx; past the end, the last level.
        if not self.t.size:
            raise ValueError("Cannot sample an empty waveform.")
        i = int(np.searchsorted(self.t, tx, side="left"))
        if i >= self.t.size:
            return float(self.levels[-1])
        return float(self.levels[i])

    def interval_levels(self) -> Tuple[float, ...]:
        """One level per bit interval, sampled mid-interval."""
        return tuple(self.level_at(b + 0.5) for b in range(self.n_intervals))


@dataclass(frozen=True)
class AnalysisReport:
    longest_palindrome: str
    longest_zero_run: int
    bitstring: str = ""

    def summary(self) -> str:
        return (
            f"Digital bitstream: {self.bitstring}\n"
            f"Longest palindrome: {self.longest_palindrome} (len={len(self.longest_palindrome)})\n"
            f"Longest 0-run: {self.longest_zero_run}\n"
        )


@dataclass
class SimResult:
    bits: Bits                         # transmitted bit sequence
    waveform: Waveform                 # line-coded signal
    decoded: Optional[Bits]            # None when the scheme has no inverse
    report: AnalysisReport
    meta: Dict[str, Any] = field(default_factory=dict)


def parse_binary(text: str) -> Bits:
    s = str(text).strip()
    if not s:
        raise InvalidBitString("Bitstring is empty.")
    if any(c not in "01" for c in s):
        raise InvalidBitString("Bitstring must contain only 0 and 1.")
    return tuple(1 if c == "1" else 0 for c in s)


def as_bits(bits: Iterable[Any]) -> Bits:
    out = []
    for b in bits:
        if isinstance(b, str):
            if b not in ("0", "1"):
                raise InvalidBitString(f"Invalid bit {b!r}.")
            out.append(int(b))
        elif b in (0, 1):
            out.append(int(b))
        else:
            raise InvalidBitString(f"Invalid bit {b!r}.")
    return tuple(out)


def bits_to_string(bits: Iterable[int]) -> str:
    return "".join("1" if b else "0" for b in bits)


def format_bits(bits: "Iterable[int] | str", max_len: int = 64) -> str:
    # Shortens long bit strings in the middle for log lines
    s = bits if isinstance(bits, str) else bits_to_string(bits)
    if len(s) > max_len:
        keep = (max_len - 3) // 2
        return f"{s[:keep]}...{s[-keep:]}"
    return s
