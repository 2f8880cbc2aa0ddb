from __future__ import annotations

from typing import Dict, List

from ..schemas.weather import DailyForecast, ForecastSample

# Local hours that count as "around noon" when picking a day's sample.
NOON_WINDOW = (11, 13)

MAX_DAYS = 5


def day_key(sample: ForecastSample) -> str:
    # Provider wall-clock date. No timezone conversion, so day boundaries
    # match what the provider reports.
    return sample.local_time.date().isoformat()


def _is_noonish(sample: ForecastSample) -> bool:
    start, end = NOON_WINDOW
    return start <= sample.local_time.hour <= end


def _pick_representative(samples: List[ForecastSample]) -> ForecastSample:
    for s in samples:
        if _is_noonish(s):
            return s
    return samples[0]


def group_forecast_by_day(
    samples: List[ForecastSample],
    max_days: int = MAX_DAYS,
) -> List[DailyForecast]:
    """
    Collapse a 3-hourly forecast list into one entry per calendar day.

    - groups keep the order in which each day first appears
    - the day's sample is the first one between 11:00 and 13:00, or the
      first sample of the day if none falls in that window
    - min/max come from every sample of the day, not just the chosen one
    """
    by_day: Dict[str, List[ForecastSample]] = {}
    for s in samples:
        by_day.setdefault(day_key(s), []).append(s)

    days: List[DailyForecast] = []
    for key, day_samples in by_day.items():
        chosen = _pick_representative(day_samples)
        temps = [s.temperature for s in day_samples]

        days.append(
            DailyForecast(
                **chosen.model_dump(),
                day_key=key,
                min_temp=min(temps),
                max_temp=max(temps),
            )
        )

    return days[:max_days]
