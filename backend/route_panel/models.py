from __future__ import annotations

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

Mode = Literal["time", "stops"]
Band = Literal["green", "yellow", "red", "none"]
BandFilter = Literal["all", "green", "yellow", "red", "none"]
SortKey = Literal["score", "avg", "id"]
SortDir = Literal["asc", "desc"]
ImportKind = Literal["sheet", "pdf", "other"]


class ColumnMap(BaseModel, frozen=True):
    StopIndex: Optional[str] = None
    Address: Optional[str] = None
    Neighborhood: Optional[str] = None
    DeliveryTime: Optional[str] = None
    LocationType: Optional[str] = None
    PlannedAT: Optional[str] = None
    RouteId: Optional[str] = None


class AddressItem(BaseModel):
    stopIndex: Optional[int] = None
    address: str


class Route(BaseModel):
    id: str
    addressCount: int = Field(0, ge=0)
    deliveryTimesMin: List[int] = Field(default_factory=list)
    maxStopIndex: Optional[int] = None
    neighborhoodSample: str = ""
    locationTypes: List[str] = Field(default_factory=list)
    plannedAtSample: str = ""
    addresses: List[AddressItem] = Field(default_factory=list)


class ImportMetadata(BaseModel):
    filename: str
    mimeType: Optional[str] = None
    importedAtEpochMs: int
    kind: ImportKind


class LastImport(ImportMetadata):
    importedAgo: str


class BandStats(BaseModel):
    total: int = 0
    green: int = 0
    yellow: int = 0
    red: int = 0
    none: int = 0


class RouteView(BaseModel):
    id: str
    band: Band
    score: Optional[int] = None
    badge: str
    worstMinutes: Optional[int] = None
    avgMinutes: Optional[int] = None
    worst: str
    avg: str
    stopsCount: int
    addressCount: int
    neighborhood: str
    locationTypes: List[str]
    plannedAt: str


class RouteDetail(RouteView):
    addresses: List[AddressItem]


class RoutesResponse(BaseModel):
    mode: Mode
    stats: BandStats
    routes: List[RouteView]


class ImportResponse(BaseModel):
    metadata: ImportMetadata
    routeCount: int
    columns: Optional[ColumnMap] = None
    stats: BandStats
