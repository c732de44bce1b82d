"""
Shared fixtures: a small synthetic parameter set whose scores can be
worked out by hand.

For the reference sample every marker except RETP lands in bin 1, where the
positive and negative probabilities are equal, and RETP lands in bin 0
(0.2 / 0.5), so the Bayes score is ln(0.4). The SVM means equal the
reference sample, so it standardises to the origin and hits the first
support vector exactly: svm = 2 * 1 - 1 * exp(-0.5 * 7) - 0.5.
"""
import copy
import math
from typing import Any, Dict

import pytest

from bloodpassport.core.inference import ABPSScorer
from bloodpassport.core.markers import MARKERS
from bloodpassport.core.parameters import BayesParameters, SVMParameters


REFERENCE_SAMPLE = dict(HCT=43.2, HGB=14.6, MCH=31.1, MCHC=33.8, MCV=92.1, RBC=4.69, RETP=0.48)
REFERENCE_VECTOR = [0.48, 14.6, 43.2, 4.69, 92.1, 31.1, 33.8]  # canonical order

BOUNDS = {
    "RETP": (0.1, 3.0),
    "HGB": (10.0, 20.0),
    "HCT": (30.0, 55.0),
    "RBC": (3.5, 6.5),
    "MCV": (75.0, 105.0),
    "MCH": (25.0, 36.0),
    "MCHC": (30.0, 38.0),
}
THRESHOLDS = {
    "RETP": [0.1, 0.5, 1.5],
    "HGB": [10.0, 14.0, 17.0],
    "HCT": [30.0, 42.0, 48.0],
    "RBC": [3.5, 4.5, 5.5],
    "MCV": [75.0, 88.0, 96.0],
    "MCH": [25.0, 30.0, 33.0],
    "MCHC": [30.0, 33.0, 35.0],
}
POSITIVE = {m: [0.2, 0.3, 0.5] for m in MARKERS}
NEGATIVE = {m: [0.5, 0.3, 0.2] for m in MARKERS}
BAYES_STD = 2.0

SVM_MEAN = dict(REFERENCE_SAMPLE)
SVM_STD = {m: 1.0 for m in MARKERS}
SUPPORT_VECTORS = [[0.0] * 7, [1.0] * 7]
KERNEL_WIDTH = 1.0
WEIGHTS = [2.0, -1.0]
BIAS = -0.5
SVM_STD_SCORE = 0.5

EXPECTED_BAYES = math.log(0.4)
EXPECTED_SVM = 2.0 - math.exp(-3.5) - 0.5
EXPECTED_ABPS = (6 * EXPECTED_BAYES / BAYES_STD + EXPECTED_SVM / SVM_STD_SCORE) / 4.75


@pytest.fixture
def reference_sample() -> Dict[str, float]:
    return dict(REFERENCE_SAMPLE)


@pytest.fixture
def reference_vector():
    return list(REFERENCE_VECTOR)


@pytest.fixture
def expected() -> Dict[str, float]:
    """Hand-derived scores for the reference sample."""
    return {"bayes": EXPECTED_BAYES, "svm": EXPECTED_SVM, "abps": EXPECTED_ABPS}


@pytest.fixture
def bayes_parameters() -> BayesParameters:
    return BayesParameters.from_tables(
        bounds=BOUNDS,
        thresholds=THRESHOLDS,
        positive=POSITIVE,
        negative=NEGATIVE,
        score_std=BAYES_STD,
    )


@pytest.fixture
def svm_parameters() -> SVMParameters:
    return SVMParameters.from_tables(
        mean=SVM_MEAN,
        std=SVM_STD,
        support_vectors=SUPPORT_VECTORS,
        kernel_width=KERNEL_WIDTH,
        weights=WEIGHTS,
        bias=BIAS,
        score_std=SVM_STD_SCORE,
        bounds=BOUNDS,
    )


@pytest.fixture
def scorer(bayes_parameters, svm_parameters) -> ABPSScorer:
    return ABPSScorer(bayes_parameters, svm_parameters, version="test-1")


@pytest.fixture
def artifact_document() -> Dict[str, Any]:
    """The synthetic parameters as a JSON-ready artifact document."""
    return copy.deepcopy({
        "version": "test-1",
        "bayes": {
            "bounds": {m: list(b) for m, b in BOUNDS.items()},
            "thresholds": THRESHOLDS,
            "positive": POSITIVE,
            "negative": NEGATIVE,
            "score_std": BAYES_STD,
        },
        "svm": {
            "mean": SVM_MEAN,
            "std": SVM_STD,
            "support_vectors": SUPPORT_VECTORS,
            "kernel_width": KERNEL_WIDTH,
            "weights": WEIGHTS,
            "bias": BIAS,
            "score_std": SVM_STD_SCORE,
            "bounds": {m: list(b) for m, b in BOUNDS.items()},
        },
    })


@pytest.fixture
def bayes_tables() -> Dict[str, Any]:
    """Marker-keyed Bayes tables, safe to modify."""
    return copy.deepcopy({
        "bounds": BOUNDS,
        "thresholds": THRESHOLDS,
        "positive": POSITIVE,
        "negative": NEGATIVE,
    })
