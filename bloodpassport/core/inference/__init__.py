"""
Inference Module

Naive Bayes, SVM and ensemble scoring for the ABPS, plus the OFF-score.
"""
from .bayes import BayesScorer, bin_index
from .svm import SVMScorer, rbf_kernel
from .ensemble import (
    ABPSResult,
    ABPSScorer,
    ProfileInterpretation,
    abps,
    combine,
    get_default_scorer,
)
from .off_score import off_score

__all__ = [
    "BayesScorer",
    "bin_index",
    "SVMScorer",
    "rbf_kernel",
    "ABPSResult",
    "ABPSScorer",
    "ProfileInterpretation",
    "abps",
    "combine",
    "get_default_scorer",
    "off_score",
]
