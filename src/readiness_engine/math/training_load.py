"""Training load: CTL / ATL / TSB via exponentially weighted daily TSS.

CTL += (TSS − CTL) / 42 and ATL += (TSS − ATL) / 7 are exactly pandas'
``ewm(alpha=1/N, adjust=False)`` over a series seeded with a zero day.

References:
    - Banister (1991): impulse-response fitness/fatigue model
    - Coggan (2003): CTL / ATL / TSB (Performance Manager)
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date, timedelta

import numpy as np
import pandas as pd

from readiness_engine.models.enums import (
    ATL_TIME_CONSTANT,
    CTL_TIME_CONSTANT,
    DEGENERATE_ATL_MIN,
    DEGENERATE_BALANCE_MIN,
    DEGENERATE_CTL_MIN,
)
from readiness_engine.models.training_load import TrainingLoadState


def sum_by_day(entries: Iterable[tuple[date, float]]) -> dict[date, float]:
    """Collapse (day, tss) pairs into one total per day."""
    totals: dict[date, float] = {}
    for day, tss in entries:
        totals[day] = totals.get(day, 0.0) + max(0.0, float(tss))
    return totals


def daily_tss_frame(daily_tss: Mapping[date, float], start: date, end: date) -> pd.Series:
    """Dense day-indexed TSS series from *start* to *end*; missing days are 0."""
    days = pd.date_range(start, end, freq="D")
    values = [float(daily_tss.get(ts.date(), 0.0)) for ts in days]
    return pd.Series(values, index=days, dtype=np.float64)


def ewma_load(values: pd.Series, time_constant: int) -> pd.Series:
    """Zero-seeded exponential load with ``alpha = 1 / time_constant``."""
    seeded = pd.concat([pd.Series([0.0], dtype=np.float64), values.reset_index(drop=True)])
    load = seeded.ewm(alpha=1.0 / time_constant, adjust=False).mean()
    return load.iloc[1:].reset_index(drop=True)


def calculate_load_series(
    daily_tss: Mapping[date, float],
    start: date,
    end: date,
    ctl_time_constant: int = CTL_TIME_CONSTANT,
    atl_time_constant: int = ATL_TIME_CONSTANT,
) -> list[TrainingLoadState]:
    """Compute one TrainingLoadState per day in ``[start, end]``.

    CTL and ATL are seeded at 0 on the day before *start*. The result is
    deterministic for identical inputs.
    """
    if start > end:
        return []
    tss = daily_tss_frame(daily_tss, start, end)
    ctl = ewma_load(tss, ctl_time_constant)
    atl = ewma_load(tss, atl_time_constant)

    states: list[TrainingLoadState] = []
    for offset, (day_tss, day_ctl, day_atl) in enumerate(zip(tss.tolist(), ctl.tolist(), atl.tolist())):
        states.append(
            TrainingLoadState.from_loads(
                start + timedelta(days=offset), float(day_tss), float(day_ctl), float(day_atl)
            )
        )
    return states


def is_degenerate(
    state: TrainingLoadState,
    ctl_min: float = DEGENERATE_CTL_MIN,
    atl_min: float = DEGENERATE_ATL_MIN,
    balance_min: float = DEGENERATE_BALANCE_MIN,
) -> bool:
    """True when CTL/ATL look like missing or garbled source data.

    Near-zero fitness, near-zero fatigue, or CTL and ATL sitting almost on
    top of each other are all symptoms of a broken activity stream rather
    than real training.
    """
    return (
        state.ctl < ctl_min
        or state.atl < atl_min
        or abs(state.ctl - state.atl) < balance_min
    )


def load_ratio(ctl: float, tsb: float) -> float | None:
    """ATL / CTL expressed through form: ``1 − TSB / CTL``."""
    if ctl <= 0:
        return None
    return 1.0 - tsb / ctl
