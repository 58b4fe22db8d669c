"""Test configuration for the reference grid toolbox."""

from pathlib import Path
import sys

import pandas as pd
import pytest


# Ensure the local package is importable when the repo isn't installed.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def affairs_df() -> pd.DataFrame:
    """Small survey-like table: one categorical column and three numeric columns."""
    return pd.DataFrame(
        {
            "salary": pd.Categorical(
                ["<1000", "<2000", "2000+", "<1000", "<2000", "2000+"],
                categories=["<1000", "<2000", "2000+"],
            ),
            "concealing": [-2.52, 3.0, 0.5, 1.0, -1.0, 0.0],
            "age": [-0.89, 1.11, 0.0, 0.22, 0.11, 0.11],
            "liking": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        },
    )


@pytest.fixture
def mixed_df() -> pd.DataFrame:
    """Table with plain object labels, booleans, integer codes and missing values."""
    return pd.DataFrame(
        {
            "city": ["Bern", "Aarau", "Chur", "Bern", "Aarau", "Bern"],
            "smoker": [True, False, False, True, False, False],
            "group": [2, 1, 2, 1, 3, 1],
            "income": [1200.0, None, 3400.0, 2200.0, 1800.0, 2600.0],
        },
    )
