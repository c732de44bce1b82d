"""
Parameter Artifact Loader

Reads the versioned JSON document that carries both pretrained classifiers
and converts it into the frozen parameter sets used for scoring.

Layout (per-marker tables are keyed by marker name)::

    {
      "version": "wada-2006",
      "bayes": {
        "bounds": {"RETP": [lo, hi], ...},
        "thresholds": {"RETP": [...], ...},
        "positive": {"RETP": [...], ...},
        "negative": {"RETP": [...], ...},
        "score_std": 1.0
      },
      "svm": {
        "mean": {"RETP": ..., ...},
        "std": {"RETP": ..., ...},
        "support_vectors": [[RETP, HGB, HCT, RBC, MCV, MCH, MCHC], ...],
        "kernel_width": 1.0,
        "weights": [...],
        "bias": 0.0,
        "score_std": 1.0,
        "bounds": {"RETP": [lo, hi], ...}
      }
    }
"""
from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError

from bloodpassport.utils import get_logger
from .errors import ParameterError
from .parameters import BayesParameters, SVMParameters

logger = get_logger(__name__)


class BayesTables(BaseModel):
    """Naive Bayes section of the artifact."""
    bounds: Dict[str, Tuple[float, float]]
    thresholds: Dict[str, List[float]]
    positive: Dict[str, List[float]]
    negative: Dict[str, List[float]]
    score_std: float = Field(..., description="Standard deviation of the Bayes score")


class SVMTables(BaseModel):
    """Support vector section of the artifact."""
    mean: Dict[str, float]
    std: Dict[str, float]
    support_vectors: List[List[float]]
    kernel_width: float
    weights: List[float]
    bias: float
    score_std: float = Field(..., description="Standard deviation of the SVM score")
    bounds: Optional[Dict[str, Tuple[float, float]]] = None


class ParameterArtifact(BaseModel):
    """Versioned container for both classifiers."""
    version: str = "unversioned"
    bayes: BayesTables
    svm: SVMTables


@dataclass(frozen=True, eq=False)
class ModelParameters:
    """Both parameter sets, as loaded from one artifact."""
    bayes: BayesParameters
    svm: SVMParameters
    version: str = "unversioned"


def parse_parameters(document: Dict[str, Any]) -> ModelParameters:
    """
    Validate a decoded artifact and build the parameter sets.

    Args:
        document: Decoded JSON document

    Returns:
        ModelParameters with frozen Bayes and SVM tables

    Raises:
        ParameterError: If the document is malformed or violates an invariant
    """
    try:
        artifact = ParameterArtifact.model_validate(document)
    except ValidationError as e:
        raise ParameterError(f"Invalid parameter artifact: {e}") from e

    bayes = BayesParameters.from_tables(
        bounds=artifact.bayes.bounds,
        thresholds=artifact.bayes.thresholds,
        positive=artifact.bayes.positive,
        negative=artifact.bayes.negative,
        score_std=artifact.bayes.score_std,
    )
    svm = SVMParameters.from_tables(
        mean=artifact.svm.mean,
        std=artifact.svm.std,
        support_vectors=artifact.svm.support_vectors,
        kernel_width=artifact.svm.kernel_width,
        weights=artifact.svm.weights,
        bias=artifact.svm.bias,
        score_std=artifact.svm.score_std,
        bounds=artifact.svm.bounds,
    )
    return ModelParameters(bayes=bayes, svm=svm, version=artifact.version)


def load_parameters(path: Union[str, Path]) -> ModelParameters:
    """Load and validate a parameter artifact from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise ParameterError(f"Parameter artifact not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as fh:
            document = json.load(fh)
    except json.JSONDecodeError as e:
        raise ParameterError(f"Parameter artifact {path} is not valid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ParameterError(f"Parameter artifact {path} could not be read: {e}") from e

    parameters = parse_parameters(document)
    logger.info(
        f"Loaded ABPS parameters {parameters.version} from {path} "
        f"({parameters.svm.n_support_vectors} support vectors)"
    )
    return parameters
