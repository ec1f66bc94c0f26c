"""
FRAP Data Loading Module

Reads and writes the delimited text tables used by the workflow:
- Observation tables with header `times, A, B, C, ...`
- Known (ground-truth) parameter tables with columns `thalf, f0, finf`
"""

import os
from pathlib import Path
from typing import Dict, Union

import pandas as pd

from frap_models import ObservationTable, ParameterSet, DataShapeError, DomainError, group_labels
from frap_models.base import PARAMETER_NAMES

PathLike = Union[str, os.PathLike]


def _read_delimited(path: PathLike, sep: str = ",", **kwargs) -> pd.DataFrame:
    try:
        return pd.read_csv(path, sep=sep, skipinitialspace=True, **kwargs)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise DataShapeError(f"Could not parse {path}: {e}") from e


def _prepare_output(path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def read_observation_table(path: PathLike, sep: str = ",") -> ObservationTable:
    """
    Load a wide FRAP observation table.

    Parameters
    ----------
    path : str or path-like
        Delimited text file whose first column is `times`
    sep : str, optional
        Column delimiter

    Returns
    -------
    table : ObservationTable

    Raises
    ------
    DataShapeError
        Missing/misplaced `times` column, non-numeric or missing cells,
        non-increasing times, no groups or more than 26 groups
    """
    frame = _read_delimited(path, sep)
    # read_csv renames repeated headers (A, A.1), so check the raw header row
    header = [str(c).strip() for c in _read_delimited(path, sep, header=None, nrows=1).iloc[0]]
    duplicated = sorted({c for c in header if header.count(c) > 1})
    if duplicated:
        raise DataShapeError(f"Duplicate column names {duplicated} in {path}")
    return ObservationTable.from_frame(frame)


def write_observation_table(table: ObservationTable, path: PathLike) -> Path:
    """Write an observation table as CSV without an index column."""
    path = _prepare_output(path)
    table.to_frame().to_csv(path, index=False)
    return path


def known_parameters_frame(known: Dict[str, ParameterSet]) -> pd.DataFrame:
    rows = [params.as_dict() for params in known.values()]
    return pd.DataFrame(rows, index=pd.Index(list(known), name='group'), columns=list(PARAMETER_NAMES))


def read_known_parameters(path: PathLike, sep: str = ",") -> Dict[str, ParameterSet]:
    """
    Load ground-truth parameters, one row per group.

    An optional `group` column supplies the labels; otherwise rows are
    labelled A, B, C, ... in file order.
    """
    frame = _read_delimited(path, sep)
    frame.columns = [str(c).strip() for c in frame.columns]
    missing = [name for name in PARAMETER_NAMES if name not in frame.columns]
    if missing:
        raise DataShapeError(f"Parameter table is missing columns {missing}")
    if frame.empty:
        raise DataShapeError("Parameter table has no rows")

    if 'group' in frame.columns:
        labels = [str(g) for g in frame['group']]
    else:
        labels = group_labels(len(frame))
    if len(set(labels)) != len(labels):
        raise DataShapeError(f"Duplicate group labels {labels}")

    numeric = frame[list(PARAMETER_NAMES)].apply(pd.to_numeric, errors='coerce')
    if numeric.isna().any().any():
        raise DataShapeError("Parameter table contains missing or non-numeric values")

    known = {}
    for label, (_, row) in zip(labels, numeric.iterrows()):
        try:
            known[label] = ParameterSet(thalf=row['thalf'], f0=row['f0'], finf=row['finf'])
        except DomainError as e:
            raise DataShapeError(f"Invalid parameters for group {label!r}: {e}") from e
    return known


def write_known_parameters(known: Dict[str, ParameterSet], path: PathLike) -> Path:
    """Write ground-truth parameters with a leading `group` column."""
    path = _prepare_output(path)
    known_parameters_frame(known).reset_index().to_csv(path, index=False)
    return path
