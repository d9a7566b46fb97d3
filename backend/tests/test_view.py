import pytest

from route_panel.models import AddressItem, Route
from route_panel.view import (
    band_stats,
    build_view,
    filter_routes,
    sort_routes,
    sorted_addresses,
    to_route_detail,
    to_route_view,
)


@pytest.fixture
def routes():
    return [
        Route(id="B", deliveryTimesMin=[250], addressCount=22, neighborhoodSample="Centro",
              locationTypes=["House"]),
        Route(id="A", deliveryTimesMin=[120, 200], addressCount=5, neighborhoodSample="Moema",
              locationTypes=["Shop", "Condo"]),
        Route(id="N", addressCount=35, neighborhoodSample="Lapa"),
        Route(id="C", deliveryTimesMin=[300], addressCount=3, maxStopIndex=31,
              neighborhoodSample="Pinheiros"),
    ]


def _ids(rs):
    return [r.id for r in rs]


def test_sort_by_id_case_insensitive():
    rs = [Route(id="B"), Route(id="a"), Route(id="C")]
    assert _ids(sort_routes(rs, "time", "id", "asc")) == ["a", "B", "C"]
    assert _ids(sort_routes(rs, "time", "id", "desc")) == ["C", "B", "a"]


def test_sort_by_id_uppercase():
    rs = [Route(id="B"), Route(id="A"), Route(id="C")]
    assert _ids(sort_routes(rs, "time", "id", "asc")) == ["A", "B", "C"]


@pytest.mark.parametrize("direction, expected", [
    ("asc", ["A", "B", "C", "N"]),
    ("desc", ["C", "B", "A", "N"]),
])
def test_missing_scores_sort_last(routes, direction, expected):
    assert _ids(sort_routes(routes, "time", "score", direction)) == expected


def test_ties_keep_input_order():
    rs = [Route(id="x", deliveryTimesMin=[100]), Route(id="y", deliveryTimesMin=[100]),
          Route(id="z", deliveryTimesMin=[50])]
    assert _ids(sort_routes(rs, "time", "score", "asc")) == ["z", "x", "y"]
    assert _ids(sort_routes(rs, "time", "score", "desc")) == ["x", "y", "z"]


def test_sort_by_avg(routes):
    # time mode: A avg 160, B 250, C 300, N none
    assert _ids(sort_routes(routes, "time", "avg", "asc")) == ["A", "B", "C", "N"]
    # stops mode reuses the stop count: B 22, A 5, N 35, C 31
    assert _ids(sort_routes(routes, "stops", "avg", "asc")) == ["A", "B", "C", "N"]
    assert _ids(sort_routes(routes, "stops", "avg", "desc")) == ["N", "C", "B", "A"]


def test_filter_all_is_every_band(routes):
    assert _ids(filter_routes(routes, "time", "all")) == _ids(routes)
    by_band = []
    for band in ("green", "yellow", "red", "none"):
        by_band += _ids(filter_routes(routes, "time", band))
    assert sorted(by_band) == sorted(_ids(routes))


@pytest.mark.parametrize("mode, band, expected", [
    ("time", "green", ["A"]),
    ("time", "yellow", ["B"]),
    ("time", "red", ["C"]),
    ("time", "none", ["N"]),
    ("stops", "green", ["A"]),
    ("stops", "yellow", ["B"]),
    ("stops", "red", ["N", "C"]),
])
def test_filter_by_band(routes, mode, band, expected):
    assert _ids(filter_routes(routes, mode, band)) == expected


@pytest.mark.parametrize("query, expected", [
    ("", ["B", "A", "N", "C"]),
    ("  ", ["B", "A", "N", "C"]),
    ("a", ["A", "N"]),
    ("MOEMA", ["A"]),
    ("pin", ["C"]),
    ("condo", ["A"]),
    ("nothing", []),
])
def test_filter_by_search(routes, query, expected):
    assert _ids(filter_routes(routes, "time", "all", query)) == expected


def test_build_view_filters_then_sorts(routes):
    out = build_view(routes, "stops", "red", "", "score", "desc")
    assert _ids(out) == ["N", "C"]


def test_band_stats(routes):
    stats = band_stats(routes, "time")
    assert (stats.total, stats.green, stats.yellow, stats.red, stats.none) == (4, 1, 1, 1, 1)
    stats = band_stats(routes, "stops")
    assert (stats.total, stats.green, stats.yellow, stats.red, stats.none) == (4, 1, 1, 2, 0)


def test_sorted_addresses():
    r = Route(id="R", addresses=[
        AddressItem(stopIndex=None, address="x"),
        AddressItem(stopIndex=3, address="c"),
        AddressItem(stopIndex=1, address="a"),
        AddressItem(stopIndex=None, address="y"),
    ])
    assert [a.address for a in sorted_addresses(r)] == ["a", "c", "x", "y"]


def test_route_view_projection(routes):
    c = routes[3]
    v = to_route_view(c, "time")
    assert v.band == "red"
    assert v.score == 300
    assert v.badge == "5h00"
    assert v.worst == "5h00"
    assert v.avg == "5h00"
    assert v.stopsCount == 31

    v = to_route_view(c, "stops")
    assert v.badge == "31 stops"
    assert v.score == 31

    n = to_route_view(routes[2], "time")
    assert n.band == "none"
    assert n.worst == "—"
    assert n.score is None


def test_route_detail_includes_sorted_addresses():
    r = Route(id="R", addressCount=2, addresses=[
        AddressItem(stopIndex=2, address="b"),
        AddressItem(stopIndex=1, address="a"),
    ])
    d = to_route_detail(r, "time")
    assert [a.stopIndex for a in d.addresses] == [1, 2]
    assert d.id == "R"
