"""Environment-driven settings for the trail search service."""

import os

# Mapbox access token. Absent token disables remote geocoding (not an error).
MAPBOX_TOKEN = (os.getenv("MAPBOX_TOKEN") or os.getenv("REACT_APP_MAPBOX_TOKEN") or "").strip() or None

MAPBOX_GEOCODING_URL = os.getenv(
    "MAPBOX_GEOCODING_URL", "https://api.mapbox.com/geocoding/v5/mapbox.places"
)

# Cloud Functions base URL serving trail alerts
FUNCTIONS_BASE_URL = os.getenv(
    "FUNCTIONS_BASE_URL", "https://us-central1-orion-sdp.cloudfunctions.net"
)

TRAILS_DB_PATH = os.getenv(
    "TRAILS_DB_PATH", os.path.join(os.path.dirname(__file__), "trails.db")
)

SEARCH_DEBOUNCE_SECONDS = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
