"""
utils/constants.py
------------------
Shared constants used across the dashboard, the data services and the
command-line report. Import from here rather than defining locally.

The ONS boundary endpoints are listed newest vintage first. ONS
frequently moves services or changes layer IDs between annual boundary
releases, so older vintages stay in the list as correctness fallbacks.
"""

from utils.models import EndpointDescriptor, GeographicFeature

# ── Area ──────────────────────────────────────────────────────────
CODFORD_ONS_CODE = "E04011682"

# Exact name only: 'Codford St Peter' must not be captured by a prefix match
CODFORD_NAME = "Codford"

AREA_LABEL = "Civil Parish of Codford, Wiltshire"
APP_TITLE  = "Codford Crime Watch"

# ── ONS Open Geography Portal ─────────────────────────────────────
_ONS_BASE = "https://services1.arcgis.com/ESMARspQHYMw9BZ9/arcgis/rest/services"

ENDPOINTS = (
    EndpointDescriptor(
        vintage="2024-MAY-BGC",
        url=f"{_ONS_BASE}/Parishes_May_2024_Boundaries_EW_BGC/FeatureServer/0/query",
        name_field="PAR24NM",
        code_field="PAR24CD",
    ),
    EndpointDescriptor(
        vintage="2023-BGC",
        url=f"{_ONS_BASE}/Parishes_December_2023_Boundaries_EW_BGC/FeatureServer/0/query",
        name_field="PAR23NM",
        code_field="PAR23CD",
    ),
    # MapServer variant is often more reliable for read-only access
    EndpointDescriptor(
        vintage="2023-BGC-Map",
        url=f"{_ONS_BASE}/Parishes_December_2023_Boundaries_EW_BGC/MapServer/0/query",
        name_field="PAR23NM",
        code_field="PAR23CD",
    ),
    # Full clipped boundaries: more detailed, larger payload
    EndpointDescriptor(
        vintage="2023-BFC",
        url=f"{_ONS_BASE}/Parishes_December_2023_Boundaries_EW_BFC/FeatureServer/0/query",
        name_field="PAR23NM",
        code_field="PAR23CD",
    ),
    EndpointDescriptor(
        vintage="2022-BGC",
        url=f"{_ONS_BASE}/Parishes_December_2022_Boundaries_EW_BGC/FeatureServer/0/query",
        name_field="PAR22NM",
        code_field="PAR22CD",
    ),
    EndpointDescriptor(
        vintage="2021-BGC",
        url=f"{_ONS_BASE}/Parishes_December_2021_Boundaries_EW_BGC/FeatureServer/0/query",
        name_field="PAR21NM",
        code_field="PAR21CD",
    ),
)

FALLBACK_NAME = f"{CODFORD_NAME} (Offline Fallback)"

# Approximate bounding box for Codford, used when every endpoint fails
FALLBACK_BOUNDARY = GeographicFeature.from_geojson({
    "type": "Feature",
    "properties": {
        "PAR23NM": FALLBACK_NAME,
        "PAR23CD": CODFORD_ONS_CODE,
    },
    "geometry": {
        "type": "Polygon",
        "coordinates": [[
            [-2.085, 51.135],
            [-2.025, 51.135],
            [-2.025, 51.185],
            [-2.085, 51.185],
            [-2.085, 51.135],
        ]],
    },
})

# ── police.uk API ─────────────────────────────────────────────────
POLICE_API_BASE = "https://data.police.uk/api"

# police.uk accepts POSTed polygons but frequently errors (500) above
# ~100 points. 45 keeps requests reliably inside that limit.
MAX_POLY_POINTS = 45

# Characters of an upstream error body kept for diagnostics
ERROR_EXCERPT_CHARS = 200

# ── HTTP ──────────────────────────────────────────────────────────
REQUEST_TIMEOUT = 15  # seconds, per request

# ── Report narration ──────────────────────────────────────────────
GEMINI_MODEL       = "gemini-2.5-flash"
API_KEY_ENV_VARS   = ("GEMINI_API_KEY", "API_KEY")
REPORT_SAMPLE_SIZE = 10

REPORT_UNAVAILABLE = "Report generation unavailable."
REPORT_CONNECTION_ERROR = (
    "Unable to generate AI report at this time due to a connection error."
)
REPORT_NO_CLIENT = (
    "AI report unavailable: set GEMINI_API_KEY to enable narrated reports."
)

# ── Reporting links ───────────────────────────────────────────────
WILTSHIRE_REPORT_URL = (
    "https://www.wiltshire.police.uk/ro/report/ocr/af/how-to-report-a-crime/"
)

# ── Plotly chart config ───────────────────────────────────────────
CHART_CONFIG = {"displayModeBar": False, "scrollZoom": False}

BASE_LAYOUT = {
    "paper_bgcolor": "rgba(0,0,0,0)",
    "plot_bgcolor":  "rgba(0,0,0,0)",
    "margin":        dict(l=10, r=10, t=30, b=10),
    "dragmode":      False,
}

AXIS_DEFAULTS = {
    "showgrid":   False,
    "zeroline":   False,
    "fixedrange": True,
}

MAP_STYLE = "carto-positron"
MAP_ZOOM  = 12

BOUNDARY_COLOUR = "#2563eb"
INCIDENT_COLOUR = "#dc2626"

# ── DataFrame column rename mappings ─────────────────────────────
INCIDENT_LOG_RENAME = {
    "month_label":        "Reported",
    "category_label":     "Category",
    "street":             "Location",
    "outcome":            "Outcome",
    "outcome_date_label": "Last update",
}
