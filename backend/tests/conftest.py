import pytest
from fastapi.testclient import TestClient

from route_panel.importer import RoutePanel
from route_panel.main import app, get_panel
from route_panel.store import FileImportStore

HEADERS = [
    "Stop",
    "Destination Address",
    "City",
    "Neighborhood",
    "Zip",
    "Driver",
    "Delivery Time",
    "Location Type",
    "Planned AT",
    "Corridor Cage",
]


@pytest.fixture
def route_csv():
    """Three routes: R1 late, R2 on time, R3 without any usable time"""
    csv_content = """Stop,Destination Address,City,Neighborhood,Zip,Driver,Delivery Time,Location Type,Planned AT,Corridor Cage
2,Rua B 20,Sao Paulo,Centro,01000,Ana,4h30,Apartment,08:00,R1
1,Rua A 10,Sao Paulo,Centro,01000,Ana,3h00,House,08:00,R1
1,Av C 5,Sao Paulo,Moema,04000,Bia,2h00,Commercial,09:00,R2
1,Rua D 7,Sao Paulo,Lapa,05000,Caio,,House,10:00,R3
"""
    return csv_content.encode("utf-8")


@pytest.fixture
def store(tmp_path):
    return FileImportStore(tmp_path / "cache")


@pytest.fixture
def panel(store):
    p = RoutePanel(store)
    p.restore()
    return p


@pytest.fixture
def client(panel):
    app.dependency_overrides[get_panel] = lambda: panel
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
