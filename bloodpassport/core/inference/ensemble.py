"""
ABPS Ensemble

Combines the naive Bayes and SVM scores into the Abnormal Blood Profile
Score and exposes the scorer facade used by the API, the CLI and callers.
"""
from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import numpy as np

from bloodpassport.config import get_settings
from bloodpassport.core.artifact import ModelParameters, load_parameters
from bloodpassport.core.errors import ParameterError
from bloodpassport.core.normalization import MarkerBatch, normalize
from bloodpassport.core.parameters import BayesParameters, SVMParameters
from bloodpassport.utils import get_logger
from .bayes import BayesScorer
from .svm import SVMScorer

logger = get_logger(__name__)

# Calibrated ensemble constants; they reproduce the reference ABPS values
# and are not tunable.
BAYES_WEIGHT = 6.0
ENSEMBLE_DIVISOR = 4.75


def combine(
    bayes: np.ndarray,
    svm: np.ndarray,
    bayes_std: float,
    svm_std: float,
) -> np.ndarray:
    """ABPS = (6 * bayes / sd_bayes + svm / sd_svm) / 4.75, NaN if either is NaN."""
    bayes = np.asarray(bayes, dtype=float)
    svm = np.asarray(svm, dtype=float)
    return (BAYES_WEIGHT * bayes / bayes_std + svm / svm_std) / ENSEMBLE_DIVISOR


class ProfileInterpretation(str, Enum):
    """How an ABPS value is read. Informational only."""
    NO_INDICATION = "no_indication"
    SUSPICIOUS = "suspicious"
    LIKELY_DOPING = "likely_doping"
    UNDEFINED = "undefined"

    @classmethod
    def from_score(cls, score: float) -> "ProfileInterpretation":
        """Map an ABPS value to its interpretation band."""
        if score is None or math.isnan(score):
            return cls.UNDEFINED
        if score <= 0:
            return cls.NO_INDICATION
        if score < 1:
            return cls.SUSPICIOUS
        return cls.LIKELY_DOPING


def _optional(value: float) -> Optional[float]:
    return None if math.isnan(value) else float(value)


@dataclass
class ABPSResult:
    """Scores and diagnostics for one sample."""
    abps: float
    bayes_score: float
    svm_score: float
    clipped_markers: List[str] = field(default_factory=list)
    bins: Dict[str, Optional[int]] = field(default_factory=dict)

    @property
    def interpretation(self) -> ProfileInterpretation:
        return ProfileInterpretation.from_score(self.abps)

    @property
    def is_defined(self) -> bool:
        return not math.isnan(self.abps)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary; undefined scores become None."""
        return {
            "abps": _optional(self.abps),
            "bayes_score": _optional(self.bayes_score),
            "svm_score": _optional(self.svm_score),
            "interpretation": self.interpretation.value,
            "clipped_markers": list(self.clipped_markers),
            "bins": dict(self.bins),
        }


class ABPSScorer:
    """
    Abnormal Blood Profile Score computation.

    Holds the two frozen parameter sets; every call normalises the input,
    clips it to the Bayes bounds, scores both classifiers and combines them.
    Instances keep no per-call state and can be shared between threads.
    """

    def __init__(
        self,
        bayes: BayesParameters,
        svm: SVMParameters,
        version: str = "unversioned",
    ):
        """
        Args:
            bayes: Naive Bayes parameter set (its bounds clip both paths)
            svm: Support vector parameter set
            version: Artifact version, for logging and API metadata
        """
        self.bayes_parameters = bayes
        self.svm_parameters = svm
        self.version = version
        self._bayes = BayesScorer(bayes)
        self._svm = SVMScorer(svm)

        if svm.lower is not None and not (
            np.allclose(svm.lower, bayes.lower) and np.allclose(svm.upper, bayes.upper)
        ):
            logger.warning("SVM bounds differ from Bayes bounds; inputs are clipped to the Bayes bounds")
        logger.info(
            f"ABPSScorer initialized (parameters {version}, "
            f"{svm.n_support_vectors} support vectors)"
        )

    @classmethod
    def from_parameters(cls, parameters: ModelParameters) -> "ABPSScorer":
        return cls(parameters.bayes, parameters.svm, version=parameters.version)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ABPSScorer":
        """Build a scorer from a JSON parameter artifact."""
        return cls.from_parameters(load_parameters(path))

    def prepare(self, data: Any = None, **markers: Any) -> MarkerBatch:
        """Normalise input into canonical order and clip to the model bounds."""
        batch = normalize(data, markers)
        return batch.clip(self.bayes_parameters.lower, self.bayes_parameters.upper)

    def components(
        self, batch: MarkerBatch, stacklevel: int = 2
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Bayes, SVM and combined scores for an already clipped batch."""
        bayes = self._bayes.score(batch, stacklevel=stacklevel + 1)
        svm = self._svm.score(batch)
        scores = combine(bayes, svm, self.bayes_parameters.score_std, self.svm_parameters.score_std)
        return bayes, svm, scores

    def score(self, data: Any = None, **markers: Any) -> Union[float, np.ndarray]:
        """
        Compute the ABPS.

        Args:
            data: One sample (mapping or 7 values in canonical order) or a
                table of samples (DataFrame, 2-D array, list of rows)
            **markers: Alternatively, HCT=, HGB=, MCH=, MCHC=, MCV=, RBC=,
                RETP= as scalars or equal-length sequences

        Returns:
            A float for a single sample, otherwise an array with one score
            per row in input order. Rows with missing markers score NaN.
        """
        return self._evaluate(data, markers, stacklevel=3)

    def _evaluate(
        self, data: Any, markers: Dict[str, Any], stacklevel: int
    ) -> Union[float, np.ndarray]:
        # stacklevel is relative to this frame, as in warnings.warn
        batch = self.prepare(data, **markers)
        _, _, scores = self.components(batch, stacklevel=stacklevel + 1)
        if batch.single:
            return float(scores[0])
        return scores

    def score_detailed(self, data: Any = None, **markers: Any) -> List[ABPSResult]:
        """Per-sample scores with both components and clipping diagnostics."""
        raw = normalize(data, markers)
        lower, upper = self.bayes_parameters.lower, self.bayes_parameters.upper
        clipped_markers = raw.clipped_markers(lower, upper)
        batch = raw.clip(lower, upper)
        bayes, svm, scores = self.components(batch, stacklevel=3)

        return [
            ABPSResult(
                abps=float(scores[i]),
                bayes_score=float(bayes[i]),
                svm_score=float(svm[i]),
                clipped_markers=clipped_markers[i],
                bins=self._bayes.describe_bins(batch.values[i]),
            )
            for i in range(len(batch))
        ]


@lru_cache()
def get_default_scorer() -> ABPSScorer:
    """
    Scorer built once from the configured parameter artifact.

    Raises:
        ParameterError: If no artifact path is configured
    """
    settings = get_settings()
    if not settings.parameters_path:
        raise ParameterError(
            "No ABPS parameter artifact configured; set BLOODPASSPORT_PARAMETERS_PATH "
            "or pass a scorer explicitly"
        )
    return ABPSScorer.from_file(settings.parameters_path)


def abps(
    data: Any = None,
    *,
    HCT: Any = None,
    HGB: Any = None,
    MCH: Any = None,
    MCHC: Any = None,
    MCV: Any = None,
    RBC: Any = None,
    RETP: Any = None,
    scorer: Optional[ABPSScorer] = None,
) -> Union[float, np.ndarray]:
    """
    Abnormal Blood Profile Score.

    Values between 0 and 1 indicate a possible suspicion of doping, values of
    1 or more mean doping is more likely than not, and values of 0 or less
    give no indication.

    Args:
        data: A sample or table of samples (see ABPSScorer.score)
        HCT: Haematocrit (%)
        HGB: Haemoglobin (g/dL)
        MCH: Mean corpuscular haemoglobin (pg)
        MCHC: Mean corpuscular haemoglobin concentration (g/dL)
        MCV: Mean corpuscular volume (fL)
        RBC: Red blood cell count (10^6/uL)
        RETP: Reticulocyte percentage (%)
        scorer: Scorer to use; defaults to the configured one

    Returns:
        A float for a single sample, otherwise an array of scores
    """
    scorer = scorer or get_default_scorer()
    markers = dict(HCT=HCT, HGB=HGB, MCH=MCH, MCHC=MCHC, MCV=MCV, RBC=RBC, RETP=RETP)
    return scorer._evaluate(data, markers, stacklevel=3)
