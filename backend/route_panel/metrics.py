from __future__ import annotations

from typing import NamedTuple, Optional

from .constants import STOPS_GREEN_BELOW, STOPS_YELLOW_MAX, TIME_GREEN_BELOW, TIME_YELLOW_MAX
from .models import Band, Mode, Route
from .parsing import round_half_up


class Classification(NamedTuple):
    score: Optional[int]
    band: Band


def worst_minutes(r: Route) -> Optional[int]:
    return max(r.deliveryTimesMin) if r.deliveryTimesMin else None


def avg_minutes(r: Route) -> Optional[int]:
    if not r.deliveryTimesMin:
        return None
    return round_half_up(sum(r.deliveryTimesMin) / len(r.deliveryTimesMin))


def stops_count(r: Route) -> int:
    # Without a usable stop-index column fall back to the row count
    if r.maxStopIndex is not None and r.maxStopIndex > 0:
        return r.maxStopIndex
    return r.addressCount


def band_for_time(minutes: Optional[int]) -> Band:
    if minutes is None:
        return "none"
    if minutes < TIME_GREEN_BELOW:
        return "green"
    if minutes <= TIME_YELLOW_MAX:
        return "yellow"
    return "red"


def band_for_stops(stops: int) -> Band:
    if stops < STOPS_GREEN_BELOW:
        return "green"
    if stops <= STOPS_YELLOW_MAX:
        return "yellow"
    return "red"


def classify(r: Route, mode: Mode) -> Classification:
    if mode == "time":
        score = worst_minutes(r)
        return Classification(score, band_for_time(score))
    score = stops_count(r)
    return Classification(score, band_for_stops(score))
