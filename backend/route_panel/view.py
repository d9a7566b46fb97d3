from __future__ import annotations

from typing import List, Optional, Union

from .metrics import avg_minutes, classify, stops_count, worst_minutes
from .models import (
    AddressItem,
    BandFilter,
    BandStats,
    Mode,
    Route,
    RouteDetail,
    RouteView,
    SortDir,
    SortKey,
)
from .parsing import format_minutes


def _matches_query(r: Route, q: str) -> bool:
    if not q:
        return True
    return (
        q in r.id.lower()
        or q in (r.neighborhoodSample or "").lower()
        or any(q in t.lower() for t in r.locationTypes)
    )


def filter_routes(routes: List[Route], mode: Mode, band: BandFilter = "all", search: str = "") -> List[Route]:
    q = (search or "").strip().lower()
    out = []
    for r in routes:
        if band != "all" and classify(r, mode).band != band:
            continue
        if _matches_query(r, q):
            out.append(r)
    return out


def _sort_value(r: Route, key: SortKey, mode: Mode) -> Union[int, str, None]:
    if key == "id":
        return r.id.lower()
    if key == "avg":
        # Averaging stop counts means nothing; stops mode reuses the count
        return avg_minutes(r) if mode == "time" else stops_count(r)
    return classify(r, mode).score


def sort_routes(routes: List[Route], mode: Mode, key: SortKey = "score", direction: SortDir = "asc") -> List[Route]:
    """Stable sort; routes without a value always go last."""
    keyed = [(_sort_value(r, key, mode), r) for r in routes]
    present = [kv for kv in keyed if kv[0] is not None]
    missing = [r for v, r in keyed if v is None]
    present.sort(key=lambda kv: kv[0], reverse=direction == "desc")
    return [r for _, r in present] + missing


def build_view(
    routes: List[Route],
    mode: Mode,
    band: BandFilter = "all",
    search: str = "",
    key: SortKey = "score",
    direction: SortDir = "asc",
) -> List[Route]:
    return sort_routes(filter_routes(routes, mode, band, search), mode, key, direction)


def band_stats(routes: List[Route], mode: Mode) -> BandStats:
    stats = BandStats(total=len(routes))
    for r in routes:
        b = classify(r, mode).band
        setattr(stats, b, getattr(stats, b) + 1)
    return stats


def sorted_addresses(r: Route) -> List[AddressItem]:
    return sorted(r.addresses, key=lambda a: (a.stopIndex is None, a.stopIndex or 0))


def _badge(mode: Mode, worst: Optional[int], stops: int) -> str:
    return format_minutes(worst) if mode == "time" else f"{stops} stops"


def to_route_view(r: Route, mode: Mode) -> RouteView:
    c = classify(r, mode)
    worst = worst_minutes(r)
    avg = avg_minutes(r)
    stops = stops_count(r)
    return RouteView(
        id=r.id,
        band=c.band,
        score=c.score,
        badge=_badge(mode, worst, stops),
        worstMinutes=worst,
        avgMinutes=avg,
        worst=format_minutes(worst),
        avg=format_minutes(avg),
        stopsCount=stops,
        addressCount=r.addressCount,
        neighborhood=r.neighborhoodSample,
        locationTypes=list(r.locationTypes),
        plannedAt=r.plannedAtSample,
    )


def to_route_detail(r: Route, mode: Mode) -> RouteDetail:
    view = to_route_view(r, mode)
    return RouteDetail(**view.model_dump(), addresses=sorted_addresses(r))
