"""
Blood Passport Scoring

OFF-score and Abnormal Blood Profile Score (ABPS) computation for
haematological anti-doping surveillance.
"""
from .core import (
    MARKERS,
    BayesParameters,
    BloodPassportError,
    LengthMismatchError,
    MarkerBatch,
    MarkerValueError,
    MissingVariablesError,
    ModelParameters,
    NumericalPrecisionWarning,
    ParameterError,
    SVMParameters,
    ScoringWarning,
    UnitsWarning,
    load_parameters,
)
from .core.inference import (
    ABPSResult,
    ABPSScorer,
    ProfileInterpretation,
    abps,
    off_score,
)

__version__ = "0.1.0"

__all__ = [
    "MARKERS",
    "BayesParameters",
    "SVMParameters",
    "ModelParameters",
    "load_parameters",
    "MarkerBatch",
    "ABPSResult",
    "ABPSScorer",
    "ProfileInterpretation",
    "abps",
    "off_score",
    "BloodPassportError",
    "LengthMismatchError",
    "MarkerValueError",
    "MissingVariablesError",
    "ParameterError",
    "ScoringWarning",
    "UnitsWarning",
    "NumericalPrecisionWarning",
]
