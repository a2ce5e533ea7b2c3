from __future__ import annotations

import logging
import math
from dataclasses import asdict
from fractions import Fraction
from typing import Iterable, List, Optional, Sequence
import numpy as np

from .d2d import simulate_d2d
from .errors import EmptyInput, InvalidAnalogSample
from .utils import (
    Bits, DeltaConfig, EncodingScheme, PcmConfig, ScrambleMode, SimResult,
    as_bits, format_bits, parse_binary,
)

logger = logging.getLogger(__name__)

TECHNIQUES = ("PCM", "DM")


# -------------------------
# Analog sample input
# -------------------------

def _parse_sample(token: str) -> float:
    try:
        x = float(token)
    except ValueError:
        raise InvalidAnalogSample(f"Not a number: {token!r}") from None
    if not math.isfinite(x):
        raise InvalidAnalogSample(f"Not a finite number: {token!r}")
    return x


def parse_analog_samples(csv: str) -> List[float]:
    """
    Parse comma-separated samples, e.g. "0.1, 0.3,0.9,-0.2".

    Empty tokens are dropped and unparseable ones skipped; only a list with no
    samples left at all is an error.
    """
    out: List[float] = []
    for token in str(csv).split(","):
        s = token.strip()
        if not s:
            continue
        try:
            out.append(_parse_sample(s))
        except InvalidAnalogSample as e:
            logger.debug("skipping analog sample: %s", e)
    if not out:
        raise EmptyInput("Invalid analog samples. Use comma-separated numbers.")
    return out


# -------------------------
# PCM: quantize + encode, and decode
# -------------------------

def pcm_quantize(samples: Sequence[float], config: PcmConfig) -> List[int]:
    """
    Uniform quantizer over [lo, hi] with codes 0..2^n-1.
    code = floor(norm * (2^n - 1)), norm being the clamped sample mapped to [0, 1].

    Codes are Python ints so any codeword width fits.
    """
    lo, hi = float(config.lo), float(config.hi)
    x = np.clip(np.asarray(samples, dtype=float), lo, hi)
    norm = (x - lo) / (hi - lo)
    max_code = config.max_code
    return [min(max(math.floor(Fraction(v) * max_code), 0), max_code) for v in norm.tolist()]


def pcm_encode(
    samples: Sequence[float],
    bits_per_sample: int = 8,
    lo: float = -1.0,
    hi: float = 1.0,
) -> Bits:
    config = PcmConfig(int(bits_per_sample), float(lo), float(hi))
    n_bits = config.bits_per_sample
    bitstream: List[int] = []
    for k in pcm_quantize(samples, config):
        cw = format(k, f"0{n_bits}b")  # MSB first
        bitstream.extend(1 if c == "1" else 0 for c in cw)
    logger.debug("PCM %d samples @ %d bits: %s", len(samples), n_bits, format_bits(bitstream))
    return tuple(bitstream)


def pcm_decode(
    bits: Iterable[int],
    bits_per_sample: int = 8,
    lo: float = -1.0,
    hi: float = 1.0,
) -> np.ndarray:
    """
    Group bits into n-bit codewords and map each code back onto [lo, hi].
    Trailing bits that do not fill a codeword are dropped.
    """
    config = PcmConfig(int(bits_per_sample), float(lo), float(hi))
    bits = as_bits(bits)
    n_bits = config.bits_per_sample
    n_full = len(bits) // n_bits

    out = np.zeros(n_full, dtype=float)
    for i in range(n_full):
        chunk = bits[i * n_bits:(i + 1) * n_bits]
        code = int("".join("1" if b else "0" for b in chunk), 2)
        # int / int keeps full precision for wide codewords
        out[i] = config.lo + code / config.max_code * (config.hi - config.lo)
    return out


# -------------------------
# DM: encode and decode
# -------------------------

def delta_modulate(samples: Sequence[float], step: float = 0.1) -> Bits:
    """
    Delta modulation, one bit per sample after the first.

    The staircase starts at the first sample (no bit for it). Each later sample
    gives 1 if it is >= the staircase, else 0, and the staircase then moves by
    +step or -step.
    """
    step = DeltaConfig(float(step)).step
    samples = [float(x) for x in samples]
    if not samples:
        raise EmptyInput("No samples to delta-modulate.")

    approx = samples[0]
    bits: List[int] = []
    for x in samples[1:]:
        b = 1 if x >= approx else 0
        bits.append(b)
        approx += step if b == 1 else -step

    logger.debug("DM %d samples, step %g: %s", len(samples), step, format_bits(bits))
    return tuple(bits)


def delta_demodulate(bits: Iterable[int], first_sample: float, step: float = 0.1) -> np.ndarray:
    step = DeltaConfig(float(step)).step
    bits = as_bits(bits)

    stair = np.zeros(len(bits) + 1, dtype=float)
    est = float(first_sample)
    stair[0] = est
    for i, b in enumerate(bits):
        est += step if b == 1 else -step
        stair[i + 1] = est
    return stair


# -------------------------
# Input front door + pipeline
# -------------------------

def _digitize(samples: Sequence[float], technique: str, pcm: PcmConfig, delta: DeltaConfig) -> Bits:
    if technique == "PCM":
        return pcm_encode(samples, pcm.bits_per_sample, pcm.lo, pcm.hi)
    return delta_modulate(samples, delta.step)


def _check_technique(technique: str) -> str:
    technique = str(technique).upper()
    if technique not in TECHNIQUES:
        raise ValueError("technique must be PCM or DM")
    return technique


def bits_from_input(
    text: str,
    *,
    analog: bool = False,
    technique: str = "PCM",
    pcm: Optional[PcmConfig] = None,
    delta: Optional[DeltaConfig] = None,
) -> Bits:
    """Binary text as-is, or CSV analog samples digitized with PCM or DM."""
    if not analog:
        return parse_binary(text)
    technique = _check_technique(technique)
    samples = parse_analog_samples(text)
    return _digitize(samples, technique, pcm or PcmConfig(), delta or DeltaConfig())


def simulate_a2d(
    samples: "Sequence[float] | str",
    technique: str = "PCM",
    scheme: "EncodingScheme | str" = EncodingScheme.NRZ_L,
    scramble: "ScrambleMode | str | None" = ScrambleMode.NONE,
    *,
    pcm: Optional[PcmConfig] = None,
    delta: Optional[DeltaConfig] = None,
) -> SimResult:
    """
    Analog samples -> PCM or DM bitstream -> line code -> line decode.

    When the line code can be decoded, the receiver side is carried on to
    reconstructed samples (meta["reconstructed"]).
    """
    technique = _check_technique(technique)
    pcm = pcm or PcmConfig()
    delta = delta or DeltaConfig()

    if isinstance(samples, str):
        samples = parse_analog_samples(samples)
    samples = [float(x) for x in samples]
    if not samples:
        raise EmptyInput("No analog samples given.")

    bitstream = _digitize(samples, technique, pcm, delta)
    res = simulate_d2d(bitstream, scheme, scramble)

    res.meta["technique"] = technique
    res.meta["num_samples"] = len(samples)
    if technique == "PCM":
        res.meta["pcm"] = asdict(pcm)
        if res.decoded is not None:
            res.meta["reconstructed"] = pcm_decode(res.decoded, pcm.bits_per_sample, pcm.lo, pcm.hi)
    else:
        res.meta["dm"] = asdict(delta)
        if res.decoded is not None:
            res.meta["reconstructed"] = delta_demodulate(res.decoded, samples[0], delta.step)
    return res
