"""Dépendances FastAPI partagées (surchargées dans les tests)."""
from fastapi import HTTPException, Request

from ..config import ADMIN_TOKEN
from ..database import SessionLocal
from ..datastore import SqlDataStore


def get_datastore() -> SqlDataStore:
    return SqlDataStore(SessionLocal)


def require_admin(request: Request) -> str:
    token = request.query_params.get("token", "") or request.cookies.get("admin_token", "")
    if token != ADMIN_TOKEN:
        raise HTTPException(403, "Accès refusé")
    return token
