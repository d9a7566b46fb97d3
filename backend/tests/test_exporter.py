import io

import openpyxl

from route_panel.exporter import export_filename, export_rows, write_export
from route_panel.models import Route
from route_panel.reader import read_table


def _routes():
    return [
        Route(id="R1", deliveryTimesMin=[180, 270], addressCount=2, maxStopIndex=2,
              neighborhoodSample="Centro", locationTypes=["House", "Apartment"], plannedAtSample="08:00"),
        Route(id="R3", addressCount=1, neighborhoodSample="Lapa"),
    ]


def test_export_rows_time_mode():
    rows = export_rows(_routes(), "time")
    assert rows[0] == {
        "RouteId": "R1",
        "StopsTotal": 2,
        "Score": "4h30",
        "Worst": "4h30",
        "Avg": "3h45",
        "Neighborhood": "Centro",
        "LocationTypes": "House, Apartment",
        "PlannedAT": "08:00",
    }
    assert rows[1]["Score"] == "—"
    assert rows[1]["Worst"] == "—"


def test_export_rows_stops_mode_uses_raw_count():
    rows = export_rows(_routes(), "stops")
    assert rows[0]["Score"] == 2
    assert rows[1]["Score"] == 1
    assert rows[0]["Worst"] == "4h30"


def test_export_filename():
    assert export_filename("time") == "routes_consolidated_time.csv"
    assert export_filename("stops", "xlsx") == "routes_consolidated_stops.xlsx"


def test_csv_round_trip():
    rows = export_rows(_routes(), "time")
    table = read_table(write_export(rows, "csv").getvalue(), "routes.csv")
    assert table.headers[:3] == ["RouteId", "StopsTotal", "Score"]
    assert [r["RouteId"] for r in table.rows] == ["R1", "R3"]
    assert [r["Score"] for r in table.rows] == ["4h30", "—"]
    assert [r["Avg"] for r in table.rows] == ["3h45", "—"]


def test_xlsx_round_trip():
    rows = export_rows(_routes(), "stops")
    data = write_export(rows, "xlsx").getvalue()
    wb = openpyxl.load_workbook(io.BytesIO(data))
    assert wb.sheetnames == ["Routes"]
    table = read_table(data, "routes.xlsx")
    assert [r["RouteId"] for r in table.rows] == ["R1", "R3"]
    assert [r["Score"] for r in table.rows] == [2, 1]
    assert [r["Worst"] for r in table.rows] == ["4h30", "—"]
