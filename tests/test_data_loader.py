import numpy as np
import pytest

from data_loader import (
    read_known_parameters,
    read_observation_table,
    write_known_parameters,
    write_observation_table,
)
from frap_models import DataShapeError, ParameterSet


def _write(path, text):
    path.write_text(text)
    return path


def test_observation_table_round_trip(tmp_path, noisy_table):
    path = write_observation_table(noisy_table, tmp_path / "data" / "synthdata.csv")
    assert path.exists()
    assert path.read_text().splitlines()[0] == "times,A,B,C"

    restored = read_observation_table(path)
    assert restored.groups == ['A', 'B', 'C']
    assert np.allclose(restored.times, noisy_table.times)
    assert np.allclose(restored.response_matrix(), noisy_table.response_matrix())


def test_header_whitespace_is_ignored(tmp_path):
    path = _write(tmp_path / "obs.csv", "times, A, B\n0, 0.1, 0.2\n1, 0.5, 0.6\n2, 0.9, 1.1\n")
    table = read_observation_table(path)
    assert table.groups == ['A', 'B']
    assert table.responses['B'][2] == pytest.approx(1.1)


def test_text_cell_rejected(tmp_path):
    path = _write(tmp_path / "obs.csv", "times,A\n0,0.1\n1,abc\n2,0.9\n")
    with pytest.raises(DataShapeError):
        read_observation_table(path)


def test_missing_cell_rejected(tmp_path):
    path = _write(tmp_path / "obs.csv", "times,A,B\n0,0.1,0.2\n1,,0.6\n2,0.9,1.1\n")
    with pytest.raises(DataShapeError):
        read_observation_table(path)


def test_times_must_come_first(tmp_path):
    path = _write(tmp_path / "obs.csv", "A,times\n0.1,0\n0.5,1\n")
    with pytest.raises(DataShapeError):
        read_observation_table(path)


def test_non_increasing_times_rejected(tmp_path):
    path = _write(tmp_path / "obs.csv", "times,A\n0,0.1\n2,0.5\n1,0.9\n")
    with pytest.raises(DataShapeError):
        read_observation_table(path)


def test_too_many_groups_rejected(tmp_path):
    header = "times," + ",".join(f"G{i}" for i in range(27))
    row0 = "0," + ",".join("0.1" for _ in range(27))
    row1 = "1," + ",".join("0.2" for _ in range(27))
    path = _write(tmp_path / "obs.csv", "\n".join([header, row0, row1]) + "\n")
    with pytest.raises(DataShapeError):
        read_observation_table(path)


def test_empty_file_rejected(tmp_path):
    path = _write(tmp_path / "obs.csv", "")
    with pytest.raises(DataShapeError):
        read_observation_table(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_observation_table(tmp_path / "nope.csv")


def test_known_parameters_round_trip(tmp_path, known_parameters):
    path = write_known_parameters(known_parameters, tmp_path / "known.csv")
    assert read_known_parameters(path) == known_parameters


def test_known_parameters_without_group_column(tmp_path):
    path = _write(tmp_path / "known.csv", "thalf,f0,finf\n11,0.1,2.1\n12,0.3,3.7\n")
    known = read_known_parameters(path)
    assert list(known) == ['A', 'B']
    assert known['B'] == ParameterSet(12.0, 0.3, 3.7)


def test_known_parameters_invalid_thalf(tmp_path):
    path = _write(tmp_path / "known.csv", "thalf,f0,finf\n0,0.1,2.1\n")
    with pytest.raises(DataShapeError):
        read_known_parameters(path)


def test_known_parameters_missing_column(tmp_path):
    path = _write(tmp_path / "known.csv", "thalf,f0\n11,0.1\n")
    with pytest.raises(DataShapeError):
        read_known_parameters(path)


def test_duplicate_group_header_rejected(tmp_path):
    path = _write(tmp_path / "obs.csv", "times,A,A\n0,0.1,0.2\n1,0.5,0.6\n2,0.9,1.1\n")
    with pytest.raises(DataShapeError, match="Duplicate"):
        read_observation_table(path)
