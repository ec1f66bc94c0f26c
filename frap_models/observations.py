"""
FRAP Observation Containers

Wide (one column per group) and tidy (one row per observation) views of
FRAP time courses. Both validate their shape on construction.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np
import pandas as pd

from .base import DataShapeError

GROUP_LABELS = string.ascii_uppercase
TIME_COLUMN = 'times'
GROUP_COLUMN = 'grp'
VALUE_COLUMN = 'ft'


def group_labels(n_groups: int) -> List[str]:
    """Return the letter labels A, B, C, ... for `n_groups` groups."""
    if n_groups < 1:
        raise DataShapeError("At least one group is required")
    if n_groups > len(GROUP_LABELS):
        raise DataShapeError(
            f"{n_groups} groups requested but only {len(GROUP_LABELS)} labels (A-Z) are available"
        )
    return list(GROUP_LABELS[:n_groups])


@dataclass
class ObservationTable:
    """
    FRAP time course with one response column per group.

    Parameters
    ----------
    times : np.ndarray
        Strictly increasing time points, length nobs
    responses : dict
        Ordered mapping group label -> response values, each of length nobs
    """
    times: np.ndarray
    responses: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self):
        self.times = np.asarray(self.times, dtype=float)
        if self.times.ndim != 1 or self.times.size < 2:
            raise DataShapeError("times must be a 1-D sequence with at least two points")
        if not np.all(np.isfinite(self.times)):
            raise DataShapeError("times contains missing or non-finite values")
        if np.any(np.diff(self.times) <= 0):
            raise DataShapeError("times must be strictly increasing")

        if not self.responses:
            raise DataShapeError("At least one group column is required")
        if len(self.responses) > len(GROUP_LABELS):
            raise DataShapeError(
                f"{len(self.responses)} group columns exceed the {len(GROUP_LABELS)} available labels"
            )

        responses = {}
        for label, values in self.responses.items():
            values = np.asarray(values, dtype=float)
            if values.shape != self.times.shape:
                raise DataShapeError(
                    f"Group {label!r} has {values.size} values, expected {self.times.size}"
                )
            if not np.all(np.isfinite(values)):
                raise DataShapeError(f"Group {label!r} contains missing or non-finite values")
            responses[str(label)] = values
        self.responses = responses

    @property
    def nobs(self) -> int:
        return int(self.times.size)

    @property
    def groups(self) -> List[str]:
        return list(self.responses)

    @property
    def n_groups(self) -> int:
        return len(self.responses)

    def response_matrix(self) -> np.ndarray:
        """Responses as an (nobs, n_groups) array, columns in group order."""
        return np.column_stack([self.responses[g] for g in self.groups])

    def mean_response(self) -> np.ndarray:
        """Mean response across groups at each time index."""
        return self.response_matrix().mean(axis=1)

    def to_frame(self) -> pd.DataFrame:
        data = {TIME_COLUMN: self.times}
        data.update(self.responses)
        return pd.DataFrame(data)

    @classmethod
    def from_frame(cls, frame: pd.DataFrame) -> "ObservationTable":
        """
        Build a table from a wide DataFrame whose first column is `times`.

        Raises
        ------
        DataShapeError
            If the layout or the values are invalid
        """
        columns = [str(c).strip() for c in frame.columns]
        if not columns or columns[0] != TIME_COLUMN:
            raise DataShapeError(f"First column must be {TIME_COLUMN!r}, got {columns[:1]}")
        if len(set(columns)) != len(columns):
            raise DataShapeError(f"Duplicate column names in {columns}")

        numeric = {}
        for original, name in zip(frame.columns, columns):
            values = pd.to_numeric(frame[original], errors='coerce')
            bad = values.isna() & frame[original].notna()
            if bad.any():
                row = int(np.flatnonzero(bad.to_numpy())[0])
                raise DataShapeError(
                    f"Non-numeric value {frame[original].iloc[row]!r} in column {name!r}, row {row + 1}"
                )
            numeric[name] = values.to_numpy(dtype=float)

        times = numeric.pop(TIME_COLUMN)
        return cls(times=times, responses=numeric)

    def tidy_frame(self) -> pd.DataFrame:
        """
        Wide-to-long reshape with columns `times`, `grp`, `ft`.

        Rows are stacked group by group, so row count is nobs * n_groups.
        """
        long = self.to_frame().melt(id_vars=TIME_COLUMN, var_name=GROUP_COLUMN, value_name=VALUE_COLUMN)
        long[GROUP_COLUMN] = pd.Categorical(long[GROUP_COLUMN], categories=self.groups)
        return long

    def tidy(self) -> "TidyObservation":
        """Stack the group columns into a long (time, group, value) relation."""
        return TidyObservation.from_frame(self.tidy_frame(), labels=self.groups)


@dataclass
class TidyObservation:
    """
    Long-format FRAP observations: one row per (time, group, value).

    `labels` fixes the group order; `group_index` maps each row to the
    position of its group in `labels`.
    """
    times: np.ndarray
    groups: np.ndarray
    values: np.ndarray
    labels: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.times = np.asarray(self.times, dtype=float)
        self.values = np.asarray(self.values, dtype=float)
        self.groups = np.asarray(self.groups, dtype=object)
        if not (self.times.shape == self.values.shape == self.groups.shape) or self.times.ndim != 1:
            raise DataShapeError("times, groups and values must be 1-D and of equal length")
        if self.times.size == 0:
            raise DataShapeError("No observations")
        if not np.all(np.isfinite(self.times)) or not np.all(np.isfinite(self.values)):
            raise DataShapeError("Observations contain missing or non-finite values")

        if not self.labels:
            self.labels = list(dict.fromkeys(str(g) for g in self.groups))
        else:
            self.labels = [str(g) for g in self.labels]
        unknown = set(str(g) for g in self.groups) - set(self.labels)
        if unknown:
            raise DataShapeError(f"Rows reference unknown groups {sorted(unknown)}")
        self.groups = np.array([str(g) for g in self.groups], dtype=object)

    @property
    def n_rows(self) -> int:
        return int(self.times.size)

    @property
    def n_groups(self) -> int:
        return len(self.labels)

    @property
    def label_index(self) -> Dict[str, int]:
        return {label: i for i, label in enumerate(self.labels)}

    @property
    def group_index(self) -> np.ndarray:
        """Integer group position of each row."""
        index = self.label_index
        return np.array([index[g] for g in self.groups], dtype=int)

    def select(self, label: str) -> "TidyObservation":
        mask = self.groups == label
        return TidyObservation(self.times[mask], self.groups[mask], self.values[mask], labels=[label])

    def to_frame(self) -> pd.DataFrame:
        frame = pd.DataFrame({
            TIME_COLUMN: self.times,
            GROUP_COLUMN: pd.Categorical(self.groups, categories=self.labels),
            VALUE_COLUMN: self.values,
        })
        return frame

    @classmethod
    def from_frame(
        cls,
        frame: pd.DataFrame,
        time_column: str = TIME_COLUMN,
        group_column: str = GROUP_COLUMN,
        value_column: str = VALUE_COLUMN,
        labels: Sequence[str] = None,
    ) -> "TidyObservation":
        missing = [c for c in (time_column, group_column, value_column) if c not in frame.columns]
        if missing:
            raise DataShapeError(f"Missing columns {missing}")
        if labels is None:
            grp = frame[group_column]
            if isinstance(grp.dtype, pd.CategoricalDtype):
                labels = [str(c) for c in grp.cat.categories]
        return cls(
            times=frame[time_column].to_numpy(dtype=float),
            groups=frame[group_column].astype(str).to_numpy(dtype=object),
            values=frame[value_column].to_numpy(dtype=float),
            labels=list(labels) if labels is not None else [],
        )
