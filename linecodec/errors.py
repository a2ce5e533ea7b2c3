from __future__ import annotations


class LineCodeError(ValueError):
    """Base class for every failure raised by linecodec."""


class InvalidBitString(LineCodeError):
    """Text (or a bit list) that is empty or holds something other than 0/1."""


class EmptyInput(LineCodeError):
    """No usable samples or bits were left to work on."""


class InvalidAnalogSample(LineCodeError):
    """A CSV token that is not a finite number. Skipped by parse_analog_samples."""


class UnsupportedCombination(LineCodeError):
    """Scrambling (B8ZS/HDB3) requested for a scheme other than AMI."""


class UnsupportedDecode(LineCodeError):
    """No inverse exists for the waveform: scrambled AMI, or nothing to decode."""
