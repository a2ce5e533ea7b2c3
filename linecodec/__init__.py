"""
linecodec - line coding, PCM/DM digitization and bitstream analysis.

Encodes bit sequences as piecewise-constant waveforms (NRZ-L, NRZ-I, Manchester,
Differential Manchester, AMI with optional B8ZS/HDB3 scrambling), decodes the
unscrambled ones back to bits, and reports the longest palindrome and longest
zero run of a bitstream.
"""

import logging

__version__ = "0.1.0"

from .errors import (
    LineCodeError,
    InvalidBitString,
    EmptyInput,
    InvalidAnalogSample,
    UnsupportedCombination,
    UnsupportedDecode,
)
from .utils import (
    AnalysisReport,
    DeltaConfig,
    EncodingScheme,
    PcmConfig,
    ScrambleMode,
    SimResult,
    Substitution,
    Waveform,
    bits_to_string,
    parse_binary,
)
from .analysis import analyze, longest_palindrome, longest_zero_run
from .d2d import decode, encode, simulate_d2d
from .a2d import (
    bits_from_input,
    delta_demodulate,
    delta_modulate,
    parse_analog_samples,
    pcm_decode,
    pcm_encode,
    simulate_a2d,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "LineCodeError",
    "InvalidBitString",
    "EmptyInput",
    "InvalidAnalogSample",
    "UnsupportedCombination",
    "UnsupportedDecode",
    "AnalysisReport",
    "DeltaConfig",
    "EncodingScheme",
    "PcmConfig",
    "ScrambleMode",
    "SimResult",
    "Substitution",
    "Waveform",
    "bits_to_string",
    "parse_binary",
    "analyze",
    "longest_palindrome",
    "longest_zero_run",
    "decode",
    "encode",
    "simulate_d2d",
    "bits_from_input",
    "delta_demodulate",
    "delta_modulate",
    "parse_analog_samples",
    "pcm_decode",
    "pcm_encode",
    "simulate_a2d",
]
