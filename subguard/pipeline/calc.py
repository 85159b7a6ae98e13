"""Day arithmetic and rounding shared by the pipeline stages."""

import math
from datetime import datetime, timedelta

_ONE_DAY = timedelta(days=1)


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves towards +infinity (564.5 -> 565)."""
    return math.floor(value + 0.5)


def whole_days_between(start: datetime, end: datetime) -> int:
    """Floor of the number of days from ``start`` to ``end``; negative if ``end`` is earlier."""
    return (end - start) // _ONE_DAY
