"""
Decimal rounding shared by the cleaning and KPI stages.

Every 2-decimal value in the staging and report tables is rounded half away
from zero, the way SQL ROUND() does, not with Python's round-half-to-even:

    >>> round_half_up(0.125)
    0.13
    >>> round(0.125, 2)
    0.12
"""

import math
from typing import Optional, Union

import numpy as np
import pandas as pd

Number = Union[int, float]


def round_half_up(
    values: Union[pd.Series, Number, None],
    decimals: int = 2
) -> Union[pd.Series, Optional[float]]:
    """
    Round a scalar or a float Series half away from zero.

    Missing values (None/NaN) are propagated: a scalar returns None, a Series
    keeps NaN in place.
    """
    factor = 10.0 ** decimals

    if isinstance(values, pd.Series):
        values = values.astype('float64')
        return np.sign(values) * np.floor(np.abs(values) * factor + 0.5) / factor

    if values is None or (isinstance(values, float) and math.isnan(values)):
        return None
    return math.copysign(math.floor(abs(values) * factor + 0.5) / factor, values)
