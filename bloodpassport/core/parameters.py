"""
Model Parameter Sets

Frozen parameter tables for the two pretrained ABPS classifiers. Both sets
are validated once on construction and their arrays are made read-only, so
a single instance can be shared by every scoring call.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple

import numpy as np

from .errors import ParameterError
from .markers import MARKERS, N_MARKERS


def _frozen(values, name: str, ndim: int = 1) -> np.ndarray:
    """Copy values into a read-only float array of the given rank."""
    try:
        arr = np.array(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise ParameterError(f"{name}: not numeric ({e})") from e
    if arr.ndim != ndim:
        raise ParameterError(f"{name}: expected {ndim}-D array, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ParameterError(f"{name}: contains non-finite values")
    arr.flags.writeable = False
    return arr


def _positive_scalar(value, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise ParameterError(f"{name}: not numeric ({e})") from e
    if not np.isfinite(value) or value <= 0:
        raise ParameterError(f"{name}: must be finite and positive, got {value}")
    return value


def _by_marker(table: Mapping[str, object], name: str) -> list:
    """Reorder a marker-keyed table into canonical marker order."""
    missing = [m for m in MARKERS if m not in table]
    if missing:
        raise ParameterError(f"{name}: missing markers {missing}")
    return [table[m] for m in MARKERS]


def _split_bounds(bounds: Mapping[str, Sequence[float]], name: str) -> Tuple[np.ndarray, np.ndarray]:
    pairs = _by_marker(bounds, name)
    for marker, pair in zip(MARKERS, pairs):
        if len(pair) != 2:
            raise ParameterError(f"{name}[{marker}]: expected (lower, upper), got {pair!r}")
    lower = _frozen([p[0] for p in pairs], f"{name}.lower")
    upper = _frozen([p[1] for p in pairs], f"{name}.upper")
    return lower, upper


def _check_bounds(lower: np.ndarray, upper: np.ndarray, name: str) -> None:
    if lower.shape != (N_MARKERS,) or upper.shape != (N_MARKERS,):
        raise ParameterError(f"{name}: bounds must have {N_MARKERS} entries")
    inverted = [m for m, lo, hi in zip(MARKERS, lower, upper) if lo > hi]
    if inverted:
        raise ParameterError(f"{name}: lower bound above upper bound for {inverted}")


@dataclass(frozen=True, eq=False)
class BayesParameters:
    """
    Discretised naive Bayes classifier tables.

    All per-marker entries are stored in canonical marker order. For marker j,
    thresholds[j] holds ascending bin edges and positive[j] / negative[j] hold
    the class-conditional probability of each bin; bin k is selected by the
    last edge the value reaches.
    """
    lower: np.ndarray
    upper: np.ndarray
    thresholds: Tuple[np.ndarray, ...]
    positive: Tuple[np.ndarray, ...]
    negative: Tuple[np.ndarray, ...]
    score_std: float

    def __post_init__(self):
        lower = _frozen(self.lower, "bayes.lower")
        upper = _frozen(self.upper, "bayes.upper")
        _check_bounds(lower, upper, "bayes")

        if not (len(self.thresholds) == len(self.positive) == len(self.negative) == N_MARKERS):
            raise ParameterError(
                f"bayes: thresholds and probability tables must have {N_MARKERS} rows"
            )

        thresholds, positive, negative = [], [], []
        for j, marker in enumerate(MARKERS):
            edges = _frozen(self.thresholds[j], f"bayes.thresholds[{marker}]")
            pos = _frozen(self.positive[j], f"bayes.positive[{marker}]")
            neg = _frozen(self.negative[j], f"bayes.negative[{marker}]")

            if edges.size == 0:
                raise ParameterError(f"bayes.thresholds[{marker}]: no bin edges")
            if np.any(np.diff(edges) < 0):
                raise ParameterError(f"bayes.thresholds[{marker}]: edges must be sorted ascending")
            for label, probs in (("positive", pos), ("negative", neg)):
                if probs.size < edges.size:
                    raise ParameterError(
                        f"bayes.{label}[{marker}]: {probs.size} bins for {edges.size} edges"
                    )
                if np.any(probs <= 0):
                    raise ParameterError(f"bayes.{label}[{marker}]: probabilities must be positive")

            thresholds.append(edges)
            positive.append(pos)
            negative.append(neg)

        object.__setattr__(self, "lower", lower)
        object.__setattr__(self, "upper", upper)
        object.__setattr__(self, "thresholds", tuple(thresholds))
        object.__setattr__(self, "positive", tuple(positive))
        object.__setattr__(self, "negative", tuple(negative))
        object.__setattr__(self, "score_std", _positive_scalar(self.score_std, "bayes.score_std"))

    @classmethod
    def from_tables(
        cls,
        bounds: Mapping[str, Sequence[float]],
        thresholds: Mapping[str, Sequence[float]],
        positive: Mapping[str, Sequence[float]],
        negative: Mapping[str, Sequence[float]],
        score_std: float,
    ) -> "BayesParameters":
        """Build from marker-keyed tables (any key order, extra keys ignored)."""
        lower, upper = _split_bounds(bounds, "bayes.bounds")
        return cls(
            lower=lower,
            upper=upper,
            thresholds=tuple(_by_marker(thresholds, "bayes.thresholds")),
            positive=tuple(_by_marker(positive, "bayes.positive")),
            negative=tuple(_by_marker(negative, "bayes.negative")),
            score_std=score_std,
        )

    @property
    def n_bins(self) -> Tuple[int, ...]:
        """Number of bin edges per marker."""
        return tuple(int(t.size) for t in self.thresholds)


@dataclass(frozen=True, eq=False)
class SVMParameters:
    """
    RBF support vector classifier tables.

    Inputs are standardised with (x - mean) / std before the kernel is
    evaluated against the support vectors, which live in standardised space.
    """
    mean: np.ndarray
    std: np.ndarray
    support_vectors: np.ndarray
    kernel_width: float
    weights: np.ndarray
    bias: float
    score_std: float
    lower: Optional[np.ndarray] = None
    upper: Optional[np.ndarray] = None

    def __post_init__(self):
        mean = _frozen(self.mean, "svm.mean")
        std = _frozen(self.std, "svm.std")
        if mean.shape != (N_MARKERS,) or std.shape != (N_MARKERS,):
            raise ParameterError(f"svm: mean and std must have {N_MARKERS} entries")
        if np.any(std <= 0):
            raise ParameterError("svm.std: standard deviations must be positive")

        support_vectors = _frozen(self.support_vectors, "svm.support_vectors", ndim=2)
        if support_vectors.shape[1] != N_MARKERS:
            raise ParameterError(
                f"svm.support_vectors: expected {N_MARKERS} columns, got {support_vectors.shape[1]}"
            )
        weights = _frozen(self.weights, "svm.weights")
        if weights.shape != (support_vectors.shape[0],):
            raise ParameterError(
                f"svm.weights: {weights.size} weights for {support_vectors.shape[0]} support vectors"
            )

        try:
            bias = float(self.bias)
        except (TypeError, ValueError) as e:
            raise ParameterError(f"svm.bias: not numeric ({e})") from e
        if not np.isfinite(bias):
            raise ParameterError("svm.bias: must be finite")

        if (self.lower is None) != (self.upper is None):
            raise ParameterError("svm: lower and upper bounds must be given together")
        if self.lower is not None:
            lower = _frozen(self.lower, "svm.lower")
            upper = _frozen(self.upper, "svm.upper")
            _check_bounds(lower, upper, "svm")
            object.__setattr__(self, "lower", lower)
            object.__setattr__(self, "upper", upper)

        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "std", std)
        object.__setattr__(self, "support_vectors", support_vectors)
        object.__setattr__(self, "weights", weights)
        object.__setattr__(self, "bias", bias)
        object.__setattr__(self, "kernel_width", _positive_scalar(self.kernel_width, "svm.kernel_width"))
        object.__setattr__(self, "score_std", _positive_scalar(self.score_std, "svm.score_std"))

    @classmethod
    def from_tables(
        cls,
        mean: Mapping[str, float],
        std: Mapping[str, float],
        support_vectors: Sequence[Sequence[float]],
        kernel_width: float,
        weights: Sequence[float],
        bias: float,
        score_std: float,
        bounds: Optional[Mapping[str, Sequence[float]]] = None,
    ) -> "SVMParameters":
        """Build from marker-keyed mean/std tables; support vectors are in canonical order."""
        lower = upper = None
        if bounds is not None:
            lower, upper = _split_bounds(bounds, "svm.bounds")
        return cls(
            mean=_by_marker(mean, "svm.mean"),
            std=_by_marker(std, "svm.std"),
            support_vectors=support_vectors,
            kernel_width=kernel_width,
            weights=weights,
            bias=bias,
            score_std=score_std,
            lower=lower,
            upper=upper,
        )

    @property
    def gamma(self) -> float:
        """RBF coefficient: K(z, s) = exp(-gamma * ||z - s||^2)."""
        return 0.5 / self.kernel_width ** 2

    @property
    def n_support_vectors(self) -> int:
        return int(self.support_vectors.shape[0])
