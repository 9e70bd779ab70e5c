"""
Layout parser — document publié (JSON brut) → liste de LayoutSection.
Une entrée illisible est écartée individuellement, jamais tout le document.
"""
import json
import logging
from typing import Any, List

from pydantic import ValidationError

from ..models import SectionType
from .schema import LayoutSection, CategorySource, TagGroupSource, ProductCollectionSource

log = logging.getLogger(__name__)

# ── Registry section_type → forme de source attendue ────────────────────────
_SOURCE_REGISTRY: dict = {
    SectionType.BANNER_MEDIA:       None,
    SectionType.BASE_CATEGORY:      CategorySource,
    SectionType.TAG_GROUP_NAV:      TagGroupSource,
    SectionType.PRODUCT_COLLECTION: ProductCollectionSource,
}


def has_consistent_source(section: LayoutSection) -> bool:
    """True si la forme de `source` correspond au section_type."""
    try:
        expected = _SOURCE_REGISTRY[SectionType(section.section_type)]
    except ValueError:
        return False
    if expected is None:
        return section.source is None
    return isinstance(section.source, expected)


def parse_layout_document(raw: Any) -> List[LayoutSection]:
    """
    Convertit un document de layout (liste JSON ou chaîne JSON) en sections.

    - None / document non-liste → []
    - entrée non-dict ou invalide → ignorée (warning)
    """
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            log.warning("Layout illisible (JSON invalide) — ignoré")
            return []
    if not isinstance(raw, list):
        if raw is not None:
            log.warning("Layout publié n'est pas une liste (%s) — ignoré", type(raw).__name__)
        return []

    sections = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict):
            log.warning("Section #%d ignorée : %s n'est pas un objet", idx, type(entry).__name__)
            continue
        try:
            sections.append(LayoutSection.model_validate(entry))
        except ValidationError as e:
            log.warning("Section #%d (%s) ignorée : %d erreur(s) de schéma",
                        idx, entry.get("section_id"), e.error_count())
    return sections


def invalid_layout_entries(entries: Any) -> List[str]:
    """
    Contrôle strict avant publication : une description par entrée invalide.
    Liste vide = document publiable tel quel.
    """
    if not isinstance(entries, list):
        return [f"layout : liste attendue, reçu {type(entries).__name__}"]
    problems = []
    for idx, entry in enumerate(entries):
        if not isinstance(entry, dict):
            problems.append(f"#{idx} : {type(entry).__name__} n'est pas un objet")
            continue
        try:
            LayoutSection.model_validate(entry)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) or "section" for err in e.errors())
            problems.append(f"#{idx} ({entry.get('section_id')}) : {fields}")
    return problems
