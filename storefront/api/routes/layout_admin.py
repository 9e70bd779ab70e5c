"""
Admin layout — brouillon + publication du layout d'accueil d'une marque.

Routes (token admin requis) :
  GET  /api/admin/stores/{store_id}/layout          → {layout_draft, layout_published}
  PUT  /api/admin/stores/{store_id}/layout/draft    → enregistre le brouillon
  POST /api/admin/stores/{store_id}/layout/publish  → publie (corps fourni, sinon le brouillon)

La publication copie le layout tel quel ; une seule section invalide bloque tout (422).
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ...database import (
    get_db, db_get_layout_data, db_update_layout_draft, db_publish_layout, LayoutPublishError,
)
from ...layout.parser import invalid_layout_entries
from ..deps import require_admin

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/admin/stores", tags=["layout-admin"], dependencies=[Depends(require_admin)])


class DraftPayload(BaseModel):
    sections: List[Dict[str, Any]] = Field(default_factory=list)


class PublishPayload(BaseModel):
    sections: Optional[List[Any]] = None


@router.get("/{store_id}/layout")
def get_layout(store_id: str, db: Session = Depends(get_db)):
    data = db_get_layout_data(db, store_id)
    if data is None:
        raise HTTPException(404, f"Store {store_id} introuvable")
    return data


@router.put("/{store_id}/layout/draft")
def save_draft(store_id: str, payload: DraftPayload, db: Session = Depends(get_db)):
    try:
        draft = db_update_layout_draft(db, store_id, payload.sections)
    except LookupError as e:
        raise HTTPException(404, str(e))
    log.info("Brouillon enregistré pour %s (%d sections)", store_id, len(draft))
    return {"layout_draft": draft}


@router.post("/{store_id}/layout/publish")
def publish(store_id: str, payload: Optional[PublishPayload] = None, db: Session = Depends(get_db)):
    if payload is not None and payload.sections is not None:
        layout = payload.sections
    else:
        data = db_get_layout_data(db, store_id)
        if data is None:
            raise HTTPException(404, f"Store {store_id} introuvable")
        layout = data["layout_draft"]

    problems = invalid_layout_entries(layout)
    if problems:
        log.warning("Publication refusée pour %s : %s", store_id, "; ".join(problems))
        raise HTTPException(422, {"message": "Invalid layout sections.", "invalid": problems})
    try:
        db_publish_layout(db, store_id, layout)
    except LayoutPublishError as e:
        raise HTTPException(400, str(e))
    except LookupError as e:
        raise HTTPException(404, str(e))
    log.info("Layout publié pour %s (%d sections)", store_id, len(layout))
    return {"ok": True, "sections": len(layout)}
