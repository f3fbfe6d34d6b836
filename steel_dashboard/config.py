"""
Configuration: card registry, period tables, performance bands, constants.

CARD_REGISTRY maps each card type to its evaluation direction, display
unit, default title and the hourly ranges its generator draws from.
"""

# ---------------------------------------------------------------------------
# Plant identity
# ---------------------------------------------------------------------------
DASHBOARD_NAME = "Steel Production Dashboard"

# ---------------------------------------------------------------------------
# Card Registry
# ---------------------------------------------------------------------------
# direction: "higher_is_better" or "lower_is_better"
# unit: display unit string
# actual / benchmark: (min, max, decimals); decimals=0 draws an integer
CARD_REGISTRY: dict[str, dict] = {
    "coils": {
        "direction": "higher_is_better",
        "unit": "coils",
        "title": "Coils Production",
        "description": "Number of steel coils produced per hour",
        "actual": (10, 15, 0),
        "benchmark": (12, 20, 0),
    },
    "tons": {
        "direction": "higher_is_better",
        "unit": "tons",
        "title": "Tons Production",
        "description": "Total tonnage of steel produced per hour",
        # actual is derived: coils/hour x weight/coil
        "actual": None,
        "benchmark": (250, 500, 0),
    },
    "shipped": {
        "direction": "higher_is_better",
        "unit": "coils",
        "title": "Coils Shipped",
        "description": "Number of coils shipped to customers per hour",
        "actual": (8, 14, 0),
        "benchmark": (10, 18, 0),
    },
    "yield": {
        "direction": "higher_is_better",
        "unit": "%",
        "title": "Production Yield",
        "description": "Percentage of good product vs total production",
        "actual": (85, 98, 1),
        "benchmark": (92, 96, 0),
    },
    "efficiency": {
        "direction": "higher_is_better",
        "unit": "%",
        "title": "Machine Efficiency",
        "description": "Overall equipment effectiveness percentage",
        "actual": (75, 95, 1),
        "benchmark": (85, 92, 0),
    },
    "quality": {
        "direction": "higher_is_better",
        "unit": "%",
        "title": "Quality Score",
        "description": "Product quality rating percentage",
        "actual": (90, 99.5, 1),
        "benchmark": (95, 98, 1),
    },
    "energy": {
        "direction": "lower_is_better",
        "unit": "MWh/ton",
        "title": "Energy Consumption",
        "description": "Energy consumption per ton of steel produced",
        "actual": (0.4, 0.8, 2),
        "benchmark": (0.5, 0.7, 2),
    },
    "custom": {
        "direction": "higher_is_better",
        "unit": "",
        "title": "Custom Metric",
        "description": "Custom KPI card with a user-defined title",
        "actual": (50, 100, 0),
        "benchmark": (70, 90, 0),
    },
}

CARD_TYPES: tuple[str, ...] = tuple(CARD_REGISTRY)

# Tons are derived from coils/hour and the weight of each coil
COILS_PER_HOUR_RANGE = (10, 15)
COIL_WEIGHT_RANGE = (15, 30, 1)

# ---------------------------------------------------------------------------
# Time periods
# ---------------------------------------------------------------------------
TIME_PERIODS: tuple[str, ...] = ("daily", "weekly", "monthly")
DEFAULT_PERIOD = "daily"

# Hours per period; monthly is an approximate 30-day month
PERIOD_MULTIPLIERS: dict[str, int] = {
    "daily": 24,
    "weekly": 24 * 7,
    "monthly": 24 * 30,
}

PERIOD_LABELS: dict[str, str] = {
    "daily": "per Day",
    "weekly": "per Week",
    "monthly": "per Month",
}

# ---------------------------------------------------------------------------
# Performance bands
# ---------------------------------------------------------------------------
# (lower bound on achievement %, status, color, status text), highest first
PERFORMANCE_BANDS: list[tuple[float, str, str, str]] = [
    (100.0, "excellent", "#4caf50", "Exceeding Target"),
    (80.0, "good", "#8bc34a", "On Track"),
    (60.0, "average", "#ff9800", "Below Target"),
    (float("-inf"), "poor", "#f44336", "Below Target"),
]

PERFORMANCE_STATUSES: tuple[str, ...] = tuple(band[1] for band in PERFORMANCE_BANDS)

# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------
TITLE_MAX_LENGTH = 50

DEFAULT_CARDS: list[dict] = [
    {"title": "Coils Production", "type": "coils"},
    {"title": "Tons Production", "type": "tons"},
    {"title": "Coils Shipped", "type": "shipped"},
]

# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------
COLLECTIONS: dict[str, str] = {
    "cards": "kpi_cards",
    "settings": "dashboard_settings",
    "analytics": "analytics_data",
}

SETTINGS_DOCUMENT_ID = "dashboard"
THEMES: tuple[str, ...] = ("light", "dark", "auto")

STORAGE_PREFIX = "steel-dashboard-"
STORAGE_KEYS: dict[str, str] = {
    "cards": "cards",
    "last_sync": "last-sync",
    "offline_changes": "offline-changes",
}

# ---------------------------------------------------------------------------
# Timers and retries (milliseconds)
# ---------------------------------------------------------------------------
REFRESH_INTERVAL_MS = 5000
CLOCK_INTERVAL_MS = 1000
RETRY_ATTEMPTS = 3
RETRY_DELAY_MS = 1000

ERROR_SEVERITY = "medium"
