"""tests/unit/test_validation.py"""

from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from smoothcast.common.errors import InsufficientDataError, InvalidInputError
from smoothcast.validation.checks import validate_series, validate_series_frame
from smoothcast.validation.schemas import SERIES_INPUT, assert_schema


def test_validate_series_passes_clean_input() -> None:
    res = validate_series([1.0, 2.0, 3.0], [10, 20, 30])
    assert res.ok
    res.raise_if_failed()  # should not raise


def test_validate_series_length_mismatch() -> None:
    res = validate_series([1.0, 2.0, 3.0], [10, 20])
    assert not res.ok
    with pytest.raises(InvalidInputError):
        res.raise_if_failed()


def test_validate_series_non_finite() -> None:
    res = validate_series([1.0, np.nan, np.inf, 4.0])
    assert not res.ok
    assert "2 NaN or infinite" in res.errors[0]
    with pytest.raises(InvalidInputError):
        res.raise_if_failed()


def test_validate_series_too_short_is_insufficient_data() -> None:
    res = validate_series([1.0], min_length=2)
    with pytest.raises(InsufficientDataError) as exc:
        res.raise_if_failed()
    assert exc.value.n_observations == 1
    assert exc.value.required == 2


def test_validate_series_duplicate_timestamps() -> None:
    res = validate_series([1.0, 2.0, 3.0], [1, 1, 2])
    assert not res.ok
    with pytest.raises(InvalidInputError):
        res.raise_if_failed()


def test_validate_series_non_numeric() -> None:
    res = validate_series(["a", "b"])
    assert not res.ok


def test_validate_series_frame_missing_columns() -> None:
    df = pd.DataFrame({"value": [1.0, 2.0]})
    res = validate_series_frame(df)
    assert not res.ok
    assert "series_input" in res.errors[0]


def test_assert_schema() -> None:
    assert_schema(pd.DataFrame({"timestamp": [0], "value": [1.0]}), SERIES_INPUT)
    with pytest.raises(KeyError):
        assert_schema(pd.DataFrame({"value": [1.0]}), SERIES_INPUT)
