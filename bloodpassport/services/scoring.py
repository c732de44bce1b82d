"""
Scoring Service - shared logic behind the HTTP endpoints
"""
import math
import warnings
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from bloodpassport.core.errors import ParameterError, ScoringWarning
from bloodpassport.core.inference import ABPSScorer, get_default_scorer, off_score
from bloodpassport.utils import get_logger

logger = get_logger(__name__)


class ScoringService:
    """
    Wraps the scorers for request/response use.

    Advisory warnings raised while scoring are captured and returned to the
    caller alongside the scores instead of being lost in the server log.
    """

    def __init__(self, scorer: Optional[ABPSScorer] = None):
        self._scorer = scorer

    @property
    def scorer(self) -> ABPSScorer:
        """The ABPS scorer; loaded from configuration on first use."""
        if self._scorer is None:
            self._scorer = get_default_scorer()
        return self._scorer

    def is_ready(self) -> bool:
        """Whether ABPS parameters are available."""
        try:
            self.scorer
        except ParameterError as e:
            logger.debug(f"ABPS parameters unavailable: {e}")
            return False
        return True

    def score_abps(self, samples: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Compute ABPS details for a list of marker mappings.

        Returns:
            Dict with parameters_version, per-sample results and warnings
        """
        scorer = self.scorer
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ScoringWarning)
            results = scorer.score_detailed(samples)

        logger.info(f"Scored {len(results)} samples ({sum(r.is_defined for r in results)} defined)")
        return {
            "parameters_version": scorer.version,
            "results": [r.to_dict() for r in results],
            "warnings": _messages(caught),
        }

    def score_off(self, hgb: Sequence[float], retp: Sequence[float]) -> Dict[str, Any]:
        """Compute OFF-scores for paired HGB (g/L) and RETP sequences."""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", ScoringWarning)
            scores = np.atleast_1d(off_score(hgb, retp))

        return {
            "scores": [None if math.isnan(s) else float(s) for s in scores],
            "warnings": _messages(caught),
        }


def _messages(caught) -> List[str]:
    return [str(w.message) for w in caught if issubclass(w.category, ScoringWarning)]
