"""
Theme resolver — thème boutique → thème application → valeurs par défaut.

Sources candidates, par ordre de priorité :
  1. theme_store (réglages de la marque)  — objet ou chaîne JSON
  2. theme (réglages globaux de l'app)    — objet ou chaîne JSON
La première source exploitable (objet non vide) l'emporte entièrement ; les champs
vides de cette source retombent sur les valeurs par défaut, jamais sur l'autre source.

headerText n'est jamais lu : il est dérivé du primary par le calcul de contraste.
"""
import json
import logging
from typing import Any, Dict, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .colors import text_color_for_background, DARK_TEXT

log = logging.getLogger(__name__)


class ThemeColors(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    primary: str
    secondary: str
    accent: str
    background: str
    header_text: str = Field(alias="headerText")

    def text_color_for(self, bg: Any) -> str:
        return text_color_for_background(bg)


DEFAULT_COLORS = ThemeColors(
    primary="#FFFFFF",      # fond header / primaire
    secondary="#E0E0E0",
    accent="#4a90e2",
    background="#f0f2f5",   # fond de l'app
    header_text=DARK_TEXT,
)

# Champ résolu → champs lus dans le thème choisi, par ordre de préférence
_FIELD_PRECEDENCE: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("primary",    ("primary", "background")),
    ("secondary",  ("secondary",)),
    ("accent",     ("accent",)),
    ("background", ("background",)),
)


def parse_theme(raw: Any, label: str = "theme") -> Optional[Dict[str, Any]]:
    """Objet → tel quel ; chaîne JSON → décodée ; vide, illisible ou non-objet → None."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            log.warning("%s : JSON illisible — ignoré", label)
            return None
    if not isinstance(raw, dict):
        log.warning("%s : ni objet ni chaîne JSON d'objet (%s) — ignoré", label, type(raw).__name__)
        return None
    return raw or None


def _usable(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _pick(theme: Dict[str, Any], keys: Sequence[str], default: str) -> str:
    for key in keys:
        if _usable(theme.get(key)):
            return theme[key]
    return default


def resolve_theme(store_theme: Any = None, app_theme: Any = None) -> ThemeColors:
    """Résout la palette à 5 couleurs ; idempotent, sans effet de bord, ne lève jamais."""
    candidates = (("theme_store", store_theme), ("app_theme", app_theme))
    chosen = None
    for label, raw in candidates:
        chosen = parse_theme(raw, label)
        if chosen is not None:
            log.debug("Thème résolu depuis %s", label)
            break

    values = {
        name: _pick(chosen, keys, getattr(DEFAULT_COLORS, name)) if chosen else getattr(DEFAULT_COLORS, name)
        for name, keys in _FIELD_PRECEDENCE
    }
    return ThemeColors(**values, header_text=text_color_for_background(values["primary"]))
