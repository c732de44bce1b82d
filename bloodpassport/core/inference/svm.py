"""
Support Vector Scorer

Gaussian RBF decision function evaluated against the frozen support set.
"""
from __future__ import annotations

import numpy as np

from bloodpassport.core.normalization import MarkerBatch
from bloodpassport.core.parameters import SVMParameters
from bloodpassport.utils import get_logger

logger = get_logger(__name__)


def rbf_kernel(z: np.ndarray, support_vectors: np.ndarray, gamma: float) -> np.ndarray:
    """K(z, s_i) = exp(-gamma * ||z - s_i||^2) for every support vector s_i."""
    diff = support_vectors - z
    return np.exp(-gamma * np.einsum("ij,ij->i", diff, diff))


class SVMScorer:
    """
    Computes sum_i w_i * K(z, s_i) + bias for each sample.

    z is the sample standardised with the per-marker mean and std. Missing
    markers propagate to a NaN score.
    """

    def __init__(self, parameters: SVMParameters):
        self.parameters = parameters

    def standardize(self, sample: np.ndarray) -> np.ndarray:
        return (sample - self.parameters.mean) / self.parameters.std

    def score_sample(self, sample: np.ndarray) -> float:
        """Decision value for one clipped sample."""
        if np.isnan(sample).any():
            return float("nan")
        p = self.parameters
        kernel = rbf_kernel(self.standardize(sample), p.support_vectors, p.gamma)
        return float(kernel @ p.weights + p.bias)

    def score(self, batch: MarkerBatch) -> np.ndarray:
        """Score every sample of a batch, preserving row order."""
        scores = np.array([self.score_sample(row) for row in batch.values], dtype=float)
        logger.debug(
            f"SVM scored {len(batch)} samples against "
            f"{self.parameters.n_support_vectors} support vectors"
        )
        return scores
