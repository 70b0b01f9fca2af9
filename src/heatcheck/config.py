"""Configuration and constants for HeatCheck."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

# Paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "heatcheck.db"

# Client registry path
CLIENTS_JSON_PATH = PROJECT_ROOT / "clients.json"

# Extracted free-text fields are cut to this many characters
MAX_FIELD_LENGTH = 150

# How many needs/objections the dashboards show
TOP_N = 3

PAGE_SIZE = 25

# Outcome text containing any of these marks the call as converted
CONVERSION_KEYWORDS = ("convert", "closed", "contract", "signed", "demo")

# Outcome filter categories offered by the call table
OUTCOME_CATEGORIES = {
    "converted": ("contract", "signed", "closed", "converted"),
    "interested": ("interested", "follow", "demo", "scheduled"),
    "objection": ("objection", "concerns", "hesitant", "pricing"),
}

# Funnel stages counted per member; a call reaches a stage when its outcome
# or main objection mentions any of the keywords
FUNNEL_STAGES = {
    "appointment_calls": ("appointment", "scheduled", "booked"),
    "price_presentations": ("price", "pricing", "cost", "quote"),
    "demo_calls": ("demo",),
    "closed_calls": ("contract", "signed", "closed", "converted"),
}

# Reporting windows
TIMEFRAMES = ["all", "daily", "weekly", "monthly", "custom"]
DEFAULT_TIMEFRAME = "weekly"

# Unassigned-call projection (estimate mode only)
PROJECTION_SHARE = 0.7
PROJECTION_CONVERSION_FACTOR = 0.08


@dataclass
class ClientConfig:
    """Configuration for a single client."""

    slug: str
    name: str
    industry: str = ""
    db_path: Path = field(default_factory=lambda: DEFAULT_DB_PATH)
    conversion_keywords: tuple[str, ...] = CONVERSION_KEYWORDS

    @property
    def exports_dir(self) -> Path:
        return self.db_path.parent / "exports"

    def ensure_dirs(self):
        """Create all client directories if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.exports_dir.mkdir(parents=True, exist_ok=True)


def _load_registry() -> dict:
    """Load the clients.json registry file."""
    if CLIENTS_JSON_PATH.exists():
        return json.loads(CLIENTS_JSON_PATH.read_text())
    return {"default": None, "clients": {}}


def _save_registry(registry: dict):
    """Save the clients.json registry file."""
    CLIENTS_JSON_PATH.write_text(json.dumps(registry, indent=2) + "\n")


def _resolve_path(raw: str) -> Path:
    path = Path(raw)
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_client(slug: str | None = None) -> ClientConfig:
    """Load a client config by slug. If slug is None, use the default."""
    registry = _load_registry()

    if slug is None:
        slug = registry.get("default")
        if not slug:
            raise ValueError("No default client configured")

    clients = registry.get("clients", {})
    if slug not in clients:
        raise ValueError(f"Unknown client: {slug}")

    entry = clients[slug]
    keywords = entry.get("conversion_keywords") or CONVERSION_KEYWORDS
    return ClientConfig(
        slug=slug,
        name=entry["name"],
        industry=entry.get("industry", ""),
        db_path=_resolve_path(entry["db_path"]),
        conversion_keywords=tuple(k.lower() for k in keywords),
    )


def list_clients() -> list[dict]:
    """Return all registered clients as dicts."""
    registry = _load_registry()
    default = registry.get("default", "")
    result = []
    for slug, entry in registry.get("clients", {}).items():
        result.append({
            "slug": slug,
            "name": entry["name"],
            "industry": entry.get("industry", ""),
            "is_default": slug == default,
        })
    return result


def create_client(slug: str, name: str, industry: str = "") -> ClientConfig:
    """Register a new client and create their directories."""
    registry = _load_registry()
    clients = registry.setdefault("clients", {})

    if slug in clients:
        raise ValueError(f"Client '{slug}' already exists")

    db_path = f"data/clients/{slug}/heatcheck.db"
    clients[slug] = {
        "name": name,
        "industry": industry,
        "db_path": db_path,
    }

    # First client registered becomes the default
    if not registry.get("default"):
        registry["default"] = slug

    _save_registry(registry)

    config = ClientConfig(
        slug=slug,
        name=name,
        industry=industry,
        db_path=PROJECT_ROOT / db_path,
    )
    config.ensure_dirs()
    return config


def set_default_client(slug: str):
    """Set the default client in the registry."""
    registry = _load_registry()
    if slug not in registry.get("clients", {}):
        raise ValueError(f"Unknown client: {slug}")
    registry["default"] = slug
    _save_registry(registry)
