"""
Naive Bayes Scorer

Discretised naive Bayes log-odds over the seven markers, using the frozen
bin-probability tables.
"""
from __future__ import annotations
import math
import warnings
from typing import List, Optional

import numpy as np

from bloodpassport.core.errors import NumericalPrecisionWarning
from bloodpassport.core.markers import MARKERS
from bloodpassport.core.normalization import MarkerBatch
from bloodpassport.core.parameters import BayesParameters
from bloodpassport.utils import get_logger

logger = get_logger(__name__)

# Beyond this magnitude the probability products approach the float range.
EXTREME_SCORE_LIMIT = 100.0


def bin_index(value: float, thresholds: np.ndarray) -> Optional[int]:
    """
    Locate the bin of a value: the index of the last threshold it reaches.

    A value exactly on a threshold selects the higher bin. Returns None for a
    missing value or a value below every threshold.
    """
    if math.isnan(value):
        return None
    index = int(np.searchsorted(thresholds, value, side="right")) - 1
    return index if index >= 0 else None


class BayesScorer:
    """
    Computes ln(prod p_pos / prod p_neg) for each sample.

    Expects samples already clipped to the parameter bounds.
    """

    def __init__(self, parameters: BayesParameters):
        self.parameters = parameters

    def sample_bins(self, sample: np.ndarray) -> List[Optional[int]]:
        """Bin index of each marker of one sample (None where undefined)."""
        return [
            bin_index(float(value), edges)
            for value, edges in zip(sample, self.parameters.thresholds)
        ]

    def score_sample(self, sample: np.ndarray) -> float:
        """Log-odds for one sample, NaN if any marker has no defined bin."""
        bins = self.sample_bins(sample)
        if any(b is None for b in bins):
            return float("nan")

        p_pos = np.array([self.parameters.positive[j][b] for j, b in enumerate(bins)])
        p_neg = np.array([self.parameters.negative[j][b] for j, b in enumerate(bins)])
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(np.log(np.prod(p_pos) / np.prod(p_neg)))

    def score(self, batch: MarkerBatch, stacklevel: int = 2) -> np.ndarray:
        """
        Score every sample of a batch.

        Args:
            batch: Clipped samples in canonical marker order
            stacklevel: Passed to warnings.warn, so wrappers can attribute
                the precision warning to their own caller

        Returns:
            Array of log-odds, one per sample, NaN where undefined
        """
        scores = np.array([self.score_sample(row) for row in batch.values], dtype=float)

        with np.errstate(invalid="ignore"):
            extreme = np.flatnonzero(np.abs(scores) > EXTREME_SCORE_LIMIT)
        if extreme.size:
            logger.warning(
                f"Bayes score exceeds {EXTREME_SCORE_LIMIT:g} in magnitude for samples "
                f"{extreme.tolist()}; results may be inaccurate"
            )
            warnings.warn(
                "ABPS: Bayes score very large, results may be inaccurate.",
                NumericalPrecisionWarning,
                stacklevel=stacklevel,
            )

        undefined = int(np.isnan(scores).sum())
        if undefined:
            logger.debug(f"Bayes score undefined for {undefined}/{len(batch)} samples")
        return scores

    def describe_bins(self, sample: np.ndarray) -> dict:
        """Marker -> bin index mapping, for diagnostics."""
        return dict(zip(MARKERS, self.sample_bins(sample)))
