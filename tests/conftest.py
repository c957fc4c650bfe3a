import os
import sys

import pytest

# ensure workspace root is on sys.path so the application modules can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from sewer_explorer.forecast import ForecastEngine, Observation


def make_series(values, *, label_prefix="t"):
    return [
        Observation(time=i, value=float(v), period_label=f"{label_prefix}{i + 1}")
        for i, v in enumerate(values)
    ]


@pytest.fixture
def engine():
    return ForecastEngine(
        {
            "N1": {
                "depth": make_series([10, 12, 11, 13, 14]),
                "rate": make_series([5, 4, 3, 2, 1]),
            },
            "N2": {"depth": make_series([7]), "rate": []},
        }
    )
