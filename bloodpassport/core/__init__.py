"""
Core scoring primitives: markers, parameter sets, input normalisation.
"""
from .errors import (
    BloodPassportError,
    LengthMismatchError,
    MarkerValueError,
    MissingVariablesError,
    NumericalPrecisionWarning,
    ParameterError,
    ScoringWarning,
    UnitsWarning,
)
from .markers import MARKERS, MARKER_INFO, Marker
from .parameters import BayesParameters, SVMParameters
from .artifact import ModelParameters, load_parameters, parse_parameters
from .normalization import MarkerBatch, normalize

__all__ = [
    "BloodPassportError",
    "LengthMismatchError",
    "MarkerValueError",
    "MissingVariablesError",
    "NumericalPrecisionWarning",
    "ParameterError",
    "ScoringWarning",
    "UnitsWarning",
    "MARKERS",
    "MARKER_INFO",
    "Marker",
    "BayesParameters",
    "SVMParameters",
    "ModelParameters",
    "load_parameters",
    "parse_parameters",
    "MarkerBatch",
    "normalize",
]
