"""
Errors and warnings raised by the scoring pipeline.

Structural problems with the caller's input or with the model parameters
abort the call. Advisory conditions (suspicious units, numerically extreme
scores) are reported as warnings and the computed value is still returned.
"""
from typing import Iterable


class BloodPassportError(Exception):
    """Base class for all scoring errors."""


class MissingVariablesError(BloodPassportError, ValueError):
    """Required haematological markers could not be identified in the input."""

    def __init__(self, message: str, missing: Iterable[str] = ()):
        super().__init__(message)
        self.missing = list(missing)


class MarkerValueError(BloodPassportError, ValueError):
    """A marker value could not be interpreted as a number."""


class LengthMismatchError(BloodPassportError, ValueError):
    """Paired input sequences do not have the same length."""


class ParameterError(BloodPassportError, ValueError):
    """Model parameters are missing, malformed or violate an invariant."""


class ScoringWarning(UserWarning):
    """Base class for advisory scoring warnings."""


class UnitsWarning(ScoringWarning):
    """Input values look like they were given in the wrong units."""


class NumericalPrecisionWarning(ScoringWarning):
    """A score is so extreme that it may be numerically unreliable."""
