from __future__ import annotations

# Keyword sets for header inference, matched as substrings of the normalized
# header (lowercase, no parenthesized suffix, alphanumerics only). The second
# element is the positional fallback used when no header matches.
COLUMN_KEYWORDS = {
    "StopIndex": (["stop", "stopnumber", "stop#", "stops", "parada", "sequencia", "seq", "ordem"], 0),
    "Address": (["destinationaddress", "address", "endereco", "destino"], 1),
    "Neighborhood": (["neighborhood", "bairro"], 3),
    "DeliveryTime": (["deliverytime", "delivery", "tempoentrega", "leadtime"], 6),
    "LocationType": (["locationtype", "tipo", "tipolocal"], 7),
    "PlannedAT": (["plannedat", "planned"], 8),
    "RouteId": (["corridorcage", "corridor", "cage", "rota"], 9),
}

# Time mode: 3h30 / 4h20 in minutes
TIME_GREEN_BELOW = 210
TIME_YELLOW_MAX = 260

# Stops mode
STOPS_GREEN_BELOW = 20
STOPS_YELLOW_MAX = 30

SHEET_EXTENSIONS = {".xlsx", ".xls", ".csv"}
PDF_EXTENSIONS = {".pdf"}
PDF_MIME = "application/pdf"

# Keys of the persisted "last import" state
STORE_DATA_KEY = "last-data"
STORE_META_KEY = "last-meta"
STORE_FILE_KEY = "last-file"

EXPORT_SHEET_NAME = "Routes"
EXPORT_COLUMNS = [
    "RouteId",
    "StopsTotal",
    "Score",
    "Worst",
    "Avg",
    "Neighborhood",
    "LocationTypes",
    "PlannedAT",
]

NO_TIME = "—"
