"""Configuration — lue depuis l'environnement au chargement du module."""
import os
from pathlib import Path

DATA_DIR = Path(__file__).parent.parent / "data"
DATA_DIR.mkdir(exist_ok=True)

DB_PATH     = os.getenv("DB_PATH", str(DATA_DIR / "storefront.db"))
DB_URL      = f"sqlite:///{DB_PATH}"
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "changeme")
LOG_LEVEL   = os.getenv("LOG_LEVEL", "INFO")

# ── Résolution de contenu ──────────────────────────────────────────────────
DEFAULT_CRITERIA_LIMIT = int(os.getenv("STOREFRONT_DEFAULT_LIMIT", "10"))
DEFAULT_TIMEFRAME_DAYS = int(os.getenv("STOREFRONT_DEFAULT_TIMEFRAME_DAYS", "7"))
SEARCH_LIMIT           = int(os.getenv("STOREFRONT_SEARCH_LIMIT", "50"))
