from __future__ import annotations

CARRIER_BRING = "bring"
CARRIER_GLS = "gls"

DEFAULT_TIMEOUT = 20
DEFAULT_USER_AGENT = "shipment-tracker/0.1"

# Bring
BRING_TRACKING_URL = "https://api.bring.com/tracking/api/v2/tracking.json"
BRING_LANGUAGE = "en"
BRING_NOOP_STATUSES = frozenset({"DELIVERY_CHANGED"})

# GLS
GLS_ENDPOINT_URL = "https://gls-group.eu/app/service/open/rest/{country}/{language}/rstt001"
GLS_TRACKING_URLS = {
    "de": "https://gls-group.eu/DE/de/paketverfolgung",
    "en": "https://gls-group.eu/DE/en/parcel-tracking",
}
GLS_LANGUAGE = "de"
GLS_PROGRESS_DELIVERED = "DELIVERED"
GLS_TIMEZONE = "Europe/Berlin"

# Raw payload excerpt kept on decode errors
RAW_EXCERPT_LENGTH = 200
