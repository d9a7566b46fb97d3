from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .models import AddressItem, ColumnMap, Route
from .parsing import parse_int, parse_minutes
from .utils import cell_str, cell_value


def _new_route(route_id: str, row: Dict[str, Any], cols: ColumnMap) -> Route:
    return Route(
        id=route_id,
        neighborhoodSample=cell_str(row, cols.Neighborhood),
        plannedAtSample=cell_str(row, cols.PlannedAT),
    )


def aggregate(rows: Iterable[Dict[str, Any]], cols: ColumnMap) -> List[Route]:
    """Fold per-stop rows into one Route per route id.

    Output keeps the order in which each id was first seen. Rows with a blank
    id are skipped; cells that fail to parse contribute nothing but the row
    still counts towards ``addressCount``.
    """
    routes: Dict[str, Route] = {}
    for row in rows:
        route_id = cell_str(row, cols.RouteId)
        if not route_id:
            continue

        r = routes.get(route_id)
        if r is None:
            r = _new_route(route_id, row, cols)
            routes[route_id] = r

        r.addressCount += 1

        stop_n = None
        if cols.StopIndex:
            stop_n = parse_int(cell_value(row, cols.StopIndex))
            if stop_n is not None:
                r.maxStopIndex = stop_n if r.maxStopIndex is None else max(r.maxStopIndex, stop_n)

        if cols.DeliveryTime:
            mins = parse_minutes(cell_value(row, cols.DeliveryTime))
            if mins is not None:
                r.deliveryTimesMin.append(mins)

        if cols.Address:
            addr = cell_str(row, cols.Address)
            if addr:
                r.addresses.append(AddressItem(stopIndex=stop_n, address=addr))

        if cols.LocationType:
            lt = cell_str(row, cols.LocationType)
            if lt:
                r.locationTypes.append(lt)

    out = []
    for r in routes.values():
        # Deduplicate once the whole import has been seen
        r.locationTypes = list(dict.fromkeys(r.locationTypes))
        out.append(r)
    return out
