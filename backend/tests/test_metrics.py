import pytest

from route_panel.metrics import avg_minutes, classify, stops_count, worst_minutes
from route_panel.models import Route


@pytest.mark.parametrize("minutes, band", [
    (209, "green"),
    (210, "yellow"),
    (260, "yellow"),
    (261, "red"),
])
def test_time_band_boundaries(minutes, band):
    r = Route(id="R", deliveryTimesMin=[minutes])
    assert classify(r, "time") == (minutes, band)


@pytest.mark.parametrize("stops, band", [
    (19, "green"),
    (20, "yellow"),
    (30, "yellow"),
    (31, "red"),
])
def test_stops_band_boundaries(stops, band):
    r = Route(id="R", maxStopIndex=stops, addressCount=1)
    assert classify(r, "stops") == (stops, band)


def test_time_mode_without_samples_has_no_band():
    r = Route(id="R", addressCount=4)
    assert classify(r, "time") == (None, "none")
    assert classify(r, "stops") == (4, "green")


def test_worst_and_average():
    r = Route(id="R", deliveryTimesMin=[180, 270])
    assert worst_minutes(r) == 270
    assert avg_minutes(r) == 225


def test_average_rounds_half_up():
    assert avg_minutes(Route(id="R", deliveryTimesMin=[1, 2])) == 2
    assert avg_minutes(Route(id="R")) is None


def test_stops_count_falls_back_to_row_count():
    assert stops_count(Route(id="R", addressCount=7)) == 7
    assert stops_count(Route(id="R", addressCount=7, maxStopIndex=0)) == 7
    assert stops_count(Route(id="R", addressCount=7, maxStopIndex=25)) == 25


def test_worst_governs_time_band():
    # average 225 would be yellow, the worst sample makes it red
    r = Route(id="R1", deliveryTimesMin=[180, 270])
    assert classify(r, "time").band == "red"
