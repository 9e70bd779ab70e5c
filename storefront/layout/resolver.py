"""
Layout resolver — sections applicables à une location, dans l'ordre de rendu.
Fonction pure et synchrone : aucun fetch, aucune validation de contenu.
"""
import math
from typing import Any, Iterable, List, Optional

from .parser import parse_layout_document
from .schema import LayoutSection


def _order_key(section: LayoutSection) -> float:
    """display_order absent ou non numérique → 0."""
    value = section.display_order
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError:
            return 0
        return 0 if math.isnan(parsed) else parsed
    return 0


def applies_to(section: LayoutSection, location_id: Optional[str]) -> bool:
    return section.location_id is None or section.location_id == location_id


def resolve_layout(sections: Iterable[LayoutSection], location_id: Optional[str]) -> List[LayoutSection]:
    """
    1. Garde les sections globales (location_id null) et celles de la location courante
    2. Trie par display_order croissant — sorted() est stable, les ex-aequo gardent l'ordre d'origine
    """
    applicable = [s for s in sections if applies_to(s, location_id)]
    return sorted(applicable, key=_order_key)


def resolve_layout_document(raw: Any, location_id: Optional[str]) -> List[LayoutSection]:
    """Pipeline complet : document brut → sections parsées → filtrées + triées."""
    return resolve_layout(parse_layout_document(raw), location_id)
