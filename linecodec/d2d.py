from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional
import numpy as np

from .analysis import analyze
from .errors import UnsupportedCombination, UnsupportedDecode
from .utils import (
    Bits, EncodingScheme, ScrambleMode, SimResult, Substitution, Waveform,
    as_bits, format_bits,
)

logger = logging.getLogger(__name__)


@dataclass
class EncoderState:
    start_level: int = +1       # NRZ-I / Differential Manchester reference level
    polarity: int = -1          # last normal AMI pulse
    last_nonzero: int = -1      # B8ZS only: last emitted non-zero level, violations included
    marks: int = 0              # marks since the last HDB3 substitution
    substitutions: List[Substitution] = field(default_factory=list)

    def next_mark(self) -> int:
        self.polarity = _nonzero(-self.polarity)
        self.last_nonzero = self.polarity
        self.marks += 1
        return self.polarity


def _nonzero(level: int) -> int:
    return level if level != 0 else +1


# ---------- Encoding helpers (one level per segment) ----------

def _nrzl_levels(bits: Bits, state: EncoderState) -> List[int]:
    return [+1 if b == 1 else -1 for b in bits]


def _nrzi_levels(bits: Bits, state: EncoderState) -> List[int]:
    level = state.start_level
    out = []
    for b in bits:
        if b == 1:
            level *= -1  # transition at start
        out.append(level)
    return out


def _manchester_levels(bits: Bits, state: EncoderState) -> List[int]:
    # 1 = high->low, 0 = low->high
    out = []
    for b in bits:
        first = +1 if b == 1 else -1
        out.extend([first, -first])
    return out


def _diff_manchester_levels(bits: Bits, state: EncoderState) -> List[int]:
    level = state.start_level
    out = []
    # 0 => transition at start; 1 => no transition at start. Always a mid-bit transition.
    for b in bits:
        if b == 0:
            level *= -1
        out.extend([level, -level])
    return out


def _ami_levels(bits: Bits, state: EncoderState) -> List[int]:
    return [state.next_mark() if b == 1 else 0 for b in bits]


def _b8zs_ami_levels(bits: Bits, state: EncoderState) -> List[int]:
    out: List[int] = []
    n = len(bits)
    i = 0
    while i < n:
        if i + 8 <= n and not any(bits[i:i + 8]):
            # 000VB0VB: V repeats the last non-zero level, B opposes it
            v1 = _nonzero(state.last_nonzero)
            b1 = -v1
            v2 = b1
            b2 = -v2
            pattern = (0, 0, 0, v1, b1, 0, v2, b2)
            # only B pulses move the AMI polarity; b2 == polarity before the run
            state.last_nonzero = b2
            state.polarity = b2
            out.extend(pattern)
            state.substitutions.append(Substitution(i, "B8ZS", "000VB0VB", pattern))
            logger.debug("B8ZS substitution at bit %d: %s", i, pattern)
            i += 8
            continue

        out.append(state.next_mark() if bits[i] == 1 else 0)
        i += 1
    return out


def _hdb3_ami_levels(bits: Bits, state: EncoderState) -> List[int]:
    out: List[int] = []
    n = len(bits)
    i = 0
    while i < n:
        if i + 4 <= n and not any(bits[i:i + 4]):
            if state.marks % 2 == 0:
                # B00V: B is a normal pulse, V repeats it
                b = -state.polarity if state.polarity != 0 else +1
                state.polarity = b
                v = _nonzero(state.polarity)
                pattern = (b, 0, 0, v)
                rule = "B00V"
            else:
                # 000V: V repeats the last pulse
                v = _nonzero(state.polarity)
                pattern = (0, 0, 0, v)
                rule = "000V"
            state.marks = 0
            out.extend(pattern)
            state.substitutions.append(Substitution(i, "HDB3", rule, pattern))
            logger.debug("HDB3 %s substitution at bit %d: %s", rule, i, pattern)
            i += 4
            continue

        out.append(state.next_mark() if bits[i] == 1 else 0)
        i += 1
    return out


LevelFn = Callable[[Bits, EncoderState], List[int]]

# scheme -> (level function, segment width in bit intervals)
_ENCODERS: Dict[EncodingScheme, tuple] = {
    EncodingScheme.NRZ_L: (_nrzl_levels, 1.0),
    EncodingScheme.NRZ_I: (_nrzi_levels, 1.0),
    EncodingScheme.MANCHESTER: (_manchester_levels, 0.5),
    EncodingScheme.DIFF_MANCHESTER: (_diff_manchester_levels, 0.5),
    EncodingScheme.AMI: (_ami_levels, 1.0),
}

_AMI_SCRAMBLERS: Dict[ScrambleMode, LevelFn] = {
    ScrambleMode.NONE: _ami_levels,
    ScrambleMode.B8ZS: _b8zs_ami_levels,
    ScrambleMode.HDB3: _hdb3_ami_levels,
}


def _levels_to_wave(levels: List[int], width: float):
    # Two points per segment (start, end) so every edge is a vertical step
    if not levels:
        return np.array([], dtype=float), np.array([], dtype=float)
    starts = np.arange(len(levels), dtype=float) * width
    t = np.column_stack([starts, starts + width]).ravel()
    return t, np.repeat(np.array(levels, dtype=float), 2)


# ---------- Public API ----------

def encode(
    bits: Iterable[int],
    scheme: "EncodingScheme | str",
    scramble: "ScrambleMode | str | None" = ScrambleMode.NONE,
    *,
    start_level: int = +1,
) -> Waveform:
    bits = as_bits(bits)
    scheme = EncodingScheme.parse(scheme)
    scramble = ScrambleMode.parse(scramble)

    if scramble is not ScrambleMode.NONE and scheme is not EncodingScheme.AMI:
        raise UnsupportedCombination(f"{scramble.value} scrambling is only defined for AMI, not {scheme.value}.")
    if start_level not in (-1, +1):
        raise ValueError("start_level must be +1 or -1.")

    level_fn, width = _ENCODERS[scheme]
    if scheme is EncodingScheme.AMI:
        level_fn = _AMI_SCRAMBLERS[scramble]

    state = EncoderState(start_level=start_level)
    levels = level_fn(bits, state)
    t, y = _levels_to_wave(levels, width)

    logger.debug("encode %s/%s: %d bits %s", scheme.value, scramble.value, len(bits), format_bits(bits))
    return Waveform(
        t=t,
        levels=y,
        scheme=scheme,
        scramble=scramble,
        substitutions=tuple(state.substitutions),
    )


def _decode_nrzl(wave: Waveform, start_level: int) -> List[int]:
    return [1 if wave.level_at(b + 0.5) > 0 else 0 for b in range(wave.n_intervals)]


def _decode_nrzi(wave: Waveform, start_level: int) -> List[int]:
    # Level at the end of each interval vs. the sign carried from the previous one
    bits: List[int] = []
    prev = np.sign(start_level)
    for b in range(wave.n_intervals):
        cur = np.sign(wave.level_at(b + 0.99))
        bits.append(1 if cur != prev else 0)
        prev = cur
    return bits


def _decode_manchester(wave: Waveform, start_level: int) -> List[int]:
    bits: List[int] = []
    for b in range(wave.n_intervals):
        first = wave.level_at(b + 0.25)
        second = wave.level_at(b + 0.75)
        bits.append(1 if first > second else 0)
    return bits


def _decode_diff_manchester(wave: Waveform, start_level: int) -> List[int]:
    # b + 0.5 hits the mid-bit edge; the sampler returns the first-half level there
    bits: List[int] = []
    prev = np.sign(start_level)
    for b in range(wave.n_intervals):
        mid = np.sign(wave.level_at(b + 0.5))
        bits.append(1 if mid == prev else 0)
        prev = mid
    return bits


def _decode_ami(wave: Waveform, start_level: int) -> List[int]:
    return [1 if abs(wave.level_at(b + 0.5)) > 1e-6 else 0 for b in range(wave.n_intervals)]


_DECODERS: Dict[EncodingScheme, Callable[[Waveform, int], List[int]]] = {
    EncodingScheme.NRZ_L: _decode_nrzl,
    EncodingScheme.NRZ_I: _decode_nrzi,
    EncodingScheme.MANCHESTER: _decode_manchester,
    EncodingScheme.DIFF_MANCHESTER: _decode_diff_manchester,
    EncodingScheme.AMI: _decode_ami,
}


def decode(
    wave: Waveform,
    scheme: "EncodingScheme | str | None" = None,
    scramble: "ScrambleMode | str | None" = None,
    *,
    start_level: int = +1,
) -> Bits:
    scheme = wave.scheme if scheme is None else EncodingScheme.parse(scheme)
    scramble = ScrambleMode.parse(scramble)

    if len(wave) == 0:
        raise UnsupportedDecode("No signal to decode.")
    for mode in (scramble, wave.scramble):
        if mode is not ScrambleMode.NONE:
            raise UnsupportedDecode(f"Decoding {mode.value} scrambled AMI is not supported.")

    bits = tuple(_DECODERS[scheme](wave, start_level))
    logger.debug("decode %s: %d bits %s", scheme.value, len(bits), format_bits(bits))
    return bits


def simulate_d2d(
    bits: Iterable[int],
    scheme: "EncodingScheme | str",
    scramble: "ScrambleMode | str | None" = ScrambleMode.NONE,
    *,
    start_level: int = +1,
) -> SimResult:
    bits = as_bits(bits)
    wave = encode(bits, scheme, scramble, start_level=start_level)

    decoded: Optional[Bits] = None
    if bits and wave.scramble is ScrambleMode.NONE:
        decoded = decode(wave, start_level=start_level)

    meta: Dict[str, Any] = {
        "scheme": wave.scheme.value,
        "scramble": wave.scramble.value,
        "substitutions": len(wave.substitutions),
        "match": None if decoded is None else (decoded == bits),
        "input_len": len(bits),
        "duration": wave.duration,
    }
    return SimResult(
        bits=bits,
        waveform=wave,
        decoded=decoded,
        report=analyze(bits),
        meta=meta,
    )
