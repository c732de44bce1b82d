"""
OFF-score

OFF = HGB [g/L] - 60 * sqrt(RETP [%]). A rise in haemoglobin together with
suppressed reticulocyte production, the signature of transfusion or ESA use,
drives the score up.
"""
from __future__ import annotations
import warnings
from typing import Union

import numpy as np

from bloodpassport.core.errors import LengthMismatchError, UnitsWarning
from bloodpassport.utils import get_logger

logger = get_logger(__name__)

RETP_COEFFICIENT = 60.0
# HGB is expected in g/L; values this low usually mean g/dL was supplied.
MIN_PLAUSIBLE_HGB = 50.0

ArrayLike = Union[float, np.ndarray, list, tuple]


def off_score(hgb: ArrayLike, retp: ArrayLike) -> Union[float, np.ndarray]:
    """
    Compute the OFF-hr score element-wise.

    Note that HGB is in g/L here, whereas the ABPS takes g/dL (a ten-fold
    difference). One UnitsWarning is emitted per call if any HGB is below 50.

    Args:
        hgb: Haemoglobin level(s) in g/L
        retp: Reticulocyte percentage(s)

    Returns:
        A float for scalar inputs, otherwise an array of scores

    Raises:
        LengthMismatchError: If hgb and retp have different lengths
    """
    hgb_arr = np.asarray(hgb, dtype=float)
    retp_arr = np.asarray(retp, dtype=float)

    if hgb_arr.ndim > 1 or retp_arr.ndim > 1:
        raise LengthMismatchError("OFF-score takes scalars or one-dimensional sequences")
    if hgb_arr.shape != retp_arr.shape:
        raise LengthMismatchError(
            f"HGB and RETP must have the same length (got {hgb_arr.size} and {retp_arr.size})"
        )

    with np.errstate(invalid="ignore"):
        low = hgb_arr < MIN_PLAUSIBLE_HGB
    if np.any(low):
        logger.warning(f"{int(np.sum(low))} HGB value(s) below {MIN_PLAUSIBLE_HGB:g} g/L")
        warnings.warn(
            "OFF-score: very low values for HGB; are the units correct (g/L expected)?",
            UnitsWarning,
            stacklevel=2,
        )

    with np.errstate(invalid="ignore"):
        scores = hgb_arr - RETP_COEFFICIENT * np.sqrt(retp_arr)

    if scores.ndim == 0:
        return float(scores)
    return scores
