"""
Input Normalisation

Converts every accepted input shape (a named sample, a positional 7-value
vector, a table of rows, keyword markers) into one MarkerBatch with columns
in canonical marker order, and clips values into the model's training range.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from bloodpassport.utils import get_logger
from .errors import LengthMismatchError, MarkerValueError, MissingVariablesError
from .markers import MARKERS, N_MARKERS

logger = get_logger(__name__)


def _to_float(value: Any, marker: str) -> float:
    """Convert one marker value; None / NA become NaN (missing, not zero)."""
    if value is None or value is pd.NA:
        return float("nan")
    if isinstance(value, (str, bytes)):
        raise MarkerValueError(f"{marker}: expected a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise MarkerValueError(f"{marker}: expected a number, got {value!r}") from e


def _missing_markers(names) -> List[str]:
    present = set(names)
    return [m for m in MARKERS if m not in present]


def _is_row(item: Any) -> bool:
    return isinstance(item, Mapping) or (
        isinstance(item, (Sequence, np.ndarray, pd.Series)) and not isinstance(item, (str, bytes))
    )


@dataclass(frozen=True, eq=False)
class MarkerBatch:
    """
    Batch of samples in canonical marker order.

    values has shape (n_samples, 7); NaN marks a missing marker value.
    single records that the caller passed one sample rather than a table,
    so scorers can hand back a scalar.
    """
    values: np.ndarray
    single: bool = False

    def __post_init__(self):
        values = np.array(self.values, dtype=float)
        if values.ndim != 2 or values.shape[1] != N_MARKERS:
            raise MissingVariablesError(
                f"Expected {N_MARKERS} marker columns, got array of shape {values.shape}"
            )
        if self.single and values.shape[0] != 1:
            raise ValueError("A single-sample batch must have exactly one row")
        values.flags.writeable = False
        object.__setattr__(self, "values", values)

    def __len__(self) -> int:
        return int(self.values.shape[0])

    @property
    def missing_mask(self) -> np.ndarray:
        """Boolean (n, 7) mask of missing marker values."""
        return np.isnan(self.values)

    def row(self, index: int) -> Dict[str, float]:
        """Get one sample as a marker-name mapping."""
        return dict(zip(MARKERS, (float(v) for v in self.values[index])))

    def to_frame(self) -> pd.DataFrame:
        """Convert to a DataFrame with canonical marker columns."""
        return pd.DataFrame(self.values, columns=list(MARKERS))

    def clip(self, lower: np.ndarray, upper: np.ndarray) -> "MarkerBatch":
        """
        Force each value into [lower, upper] for its marker.

        Out-of-range values are replaced silently by the nearest bound since
        the classifiers saturate outside their training range. Missing values
        stay missing.
        """
        clipped = np.clip(self.values, lower, upper)
        if logger.isEnabledFor(logging.DEBUG):
            changed = self.clipped_markers(lower, upper)
            for i, markers in enumerate(changed):
                if markers:
                    logger.debug(f"Sample {i}: clipped {', '.join(markers)} to model bounds")
        return MarkerBatch(values=clipped, single=self.single)

    def clipped_markers(self, lower: np.ndarray, upper: np.ndarray) -> List[List[str]]:
        """List, per sample, the markers that fall outside [lower, upper]."""
        with np.errstate(invalid="ignore"):
            outside = (self.values < lower) | (self.values > upper)
        return [[MARKERS[j] for j in np.flatnonzero(row)] for row in outside]

    # ---- Adapters for each accepted input shape ----

    @classmethod
    def from_mapping(cls, sample: Mapping[str, Any]) -> "MarkerBatch":
        """One sample given as marker name -> value. Extra keys are ignored."""
        missing = _missing_markers(sample.keys())
        if missing:
            raise MissingVariablesError(
                f"ABPS requires {N_MARKERS} haematological variables; missing {missing}",
                missing=missing,
            )
        row = [_to_float(sample[m], m) for m in MARKERS]
        return cls(values=np.array([row]), single=True)

    @classmethod
    def from_sequence(cls, values: Sequence[Any]) -> "MarkerBatch":
        """One sample given positionally, in canonical marker order."""
        values = list(values)
        if len(values) != N_MARKERS:
            raise MissingVariablesError(
                f"Unnamed input must have exactly {N_MARKERS} values in the order "
                f"{', '.join(MARKERS)}; got {len(values)}"
            )
        row = [_to_float(v, m) for m, v in zip(MARKERS, values)]
        return cls(values=np.array([row]), single=True)

    @classmethod
    def from_rows(cls, rows: Sequence[Any]) -> "MarkerBatch":
        """A table given as a list of rows; each row is a mapping or a 7-sequence."""
        matrix = []
        for i, row in enumerate(rows):
            if isinstance(row, pd.Series):
                sample = cls._from_series(row)
            elif isinstance(row, Mapping):
                sample = cls.from_mapping(row)
            elif _is_row(row):
                sample = cls.from_sequence(row)
            else:
                raise MissingVariablesError(f"Row {i} is not a sample: {row!r}")
            matrix.append(sample.values[0])
        values = np.array(matrix) if matrix else np.empty((0, N_MARKERS))
        return cls(values=values)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "MarkerBatch":
        """A 2-D numeric array with one positional sample per row."""
        if array.ndim != 2 or array.shape[1] != N_MARKERS:
            raise MissingVariablesError(
                f"Unnamed table must have exactly {N_MARKERS} columns in the order "
                f"{', '.join(MARKERS)}; got shape {array.shape}"
            )
        try:
            values = array.astype(float)
        except (TypeError, ValueError) as e:
            raise MarkerValueError(f"Marker table is not numeric: {e}") from e
        return cls(values=values)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "MarkerBatch":
        """
        A DataFrame of samples.

        Named columns are selected and reordered (extra columns ignored). A
        frame whose labels are not strings is read positionally, which needs
        exactly 7 columns.
        """
        named = any(isinstance(c, str) for c in frame.columns)
        if not named:
            if frame.shape[1] != N_MARKERS:
                raise MissingVariablesError(
                    f"Unnamed table must have exactly {N_MARKERS} columns; got {frame.shape[1]}"
                )
            selected = frame.copy()
            selected.columns = list(MARKERS)
        else:
            missing = _missing_markers(frame.columns)
            if missing:
                raise MissingVariablesError(
                    f"ABPS requires {N_MARKERS} haematological variables; missing {missing}",
                    missing=missing,
                )
            selected = frame.loc[:, list(MARKERS)]

        try:
            numeric = selected.apply(pd.to_numeric)
        except (TypeError, ValueError) as e:
            raise MarkerValueError(f"Marker table is not numeric: {e}") from e
        return cls(values=numeric.to_numpy(dtype=float, na_value=np.nan))

    @classmethod
    def from_markers(cls, markers: Mapping[str, Any]) -> "MarkerBatch":
        """
        Markers given one per keyword, as scalars or equal-length sequences.

        A keyword set to None counts as absent.
        """
        given = {k: v for k, v in markers.items() if v is not None}
        if not given:
            raise MissingVariablesError(
                "ABPS requires either a table of samples or the 7 haematological variables",
                missing=MARKERS,
            )
        missing = _missing_markers(given.keys())
        if missing:
            raise MissingVariablesError(
                f"ABPS requires {N_MARKERS} haematological variables; missing {missing}",
                missing=missing,
            )

        columns = {m: np.atleast_1d(np.asarray(given[m], dtype=object)) for m in MARKERS}
        lengths = {m: len(c) for m, c in columns.items()}
        if len(set(lengths.values())) != 1:
            raise LengthMismatchError(f"Marker sequences have different lengths: {lengths}")

        single = all(np.ndim(given[m]) == 0 for m in MARKERS)
        n = lengths[MARKERS[0]]
        values = np.empty((n, N_MARKERS))
        for j, m in enumerate(MARKERS):
            values[:, j] = [_to_float(v, m) for v in columns[m]]
        return cls(values=values, single=single)

    @classmethod
    def _from_series(cls, series: pd.Series) -> "MarkerBatch":
        if any(isinstance(k, str) for k in series.index):
            return cls.from_mapping(series.to_dict())
        return cls.from_sequence(series.tolist())

    @classmethod
    def coerce(cls, data: Any) -> "MarkerBatch":
        """
        Normalise any supported input shape into a MarkerBatch.

        Args:
            data: A MarkerBatch, a mapping, a 7-value sequence or 1-D array,
                a DataFrame, a Series, a 2-D array, or a list of rows

        Returns:
            MarkerBatch in canonical marker order

        Raises:
            MissingVariablesError: If the 7 markers cannot be identified
            MarkerValueError: If a value is not numeric
        """
        if isinstance(data, MarkerBatch):
            return data
        if data is None:
            raise MissingVariablesError(
                "ABPS requires either a table of samples or the 7 haematological variables",
                missing=MARKERS,
            )
        if isinstance(data, pd.DataFrame):
            return cls.from_frame(data)
        if isinstance(data, pd.Series):
            return cls._from_series(data)
        if isinstance(data, Mapping):
            return cls.from_mapping(data)
        if isinstance(data, np.ndarray):
            if data.ndim == 1:
                return cls.from_sequence(data.tolist())
            return cls.from_array(data)
        if isinstance(data, (str, bytes)):
            raise MarkerValueError(f"Cannot interpret {data!r} as haematological data")
        if isinstance(data, Sequence):
            if len(data) > 0 and all(_is_row(item) for item in data):
                return cls.from_rows(data)
            return cls.from_sequence(data)
        raise MissingVariablesError(
            f"Unnamed input must have exactly {N_MARKERS} values; got {type(data).__name__}"
        )


def normalize(
    data: Any = None,
    markers: Optional[Mapping[str, Any]] = None,
) -> MarkerBatch:
    """Build a MarkerBatch from positional data or from keyword markers."""
    unknown = sorted(set(markers or {}) - set(MARKERS))
    if unknown:
        raise TypeError(f"Unknown marker keywords: {unknown}")
    if data is not None:
        if markers and any(v is not None for v in markers.values()):
            raise ValueError("Pass either a data argument or keyword markers, not both")
        return MarkerBatch.coerce(data)
    return MarkerBatch.from_markers(markers or {})
