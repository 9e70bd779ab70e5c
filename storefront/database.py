"""SQLite — init + session + CRUD helpers"""
import json
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .config import DB_URL
from .models import (
    Base, StoreDB, LocationDB, CategoryDB, FeaturedTagDB, StoreSettingsDB, AppSettingsDB,
)


def make_session_factory(db_url: str) -> sessionmaker:
    engine = create_engine(db_url, connect_args={"check_same_thread": False})
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


SessionLocal = make_session_factory(DB_URL)


class LayoutPublishError(ValueError):
    pass


def init_db(session_factory: Optional[sessionmaker] = None):
    factory = session_factory or SessionLocal
    Base.metadata.create_all(bind=factory.kw["bind"])


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ── JSON helpers ──
def jl(s: Optional[str]) -> Any:
    """Décode une colonne JSON TEXT ; None si vide ou illisible."""
    if s is None or s == "":
        return None
    try:
        return json.loads(s)
    except (TypeError, ValueError):
        return None

def jd(o: Any) -> str:
    return json.dumps(o, ensure_ascii=False)


# ── Store ──
def db_get_store(db: Session, store_id: str) -> Optional[StoreDB]:
    return db.query(StoreDB).filter_by(id=store_id).first()

def db_list_stores(db: Session) -> List[StoreDB]:
    return db.query(StoreDB).order_by(StoreDB.name).all()


# ── Layout draft / published ──
def db_get_layout_data(db: Session, store_id: str) -> Optional[dict]:
    """Retourne {layout_draft, layout_published} ; draft → [] et published → None par défaut."""
    if not store_id:
        return None
    store = db_get_store(db, store_id)
    if store is None:
        return None
    draft     = jl(store.home_layout_draft)
    published = jl(store.home_layout_published)
    return {
        "layout_draft":     draft if draft is not None else [],
        "layout_published": published,
    }

def db_update_layout_draft(db: Session, store_id: str, layout: list) -> list:
    if not store_id:
        raise LayoutPublishError("Store ID is required to update layout draft.")
    store = db_get_store(db, store_id)
    if store is None:
        raise LookupError(f"Store {store_id!r} introuvable")
    store.home_layout_draft = jd(layout)
    store.updated_at = datetime.utcnow()
    db.commit(); db.refresh(store)
    return jl(store.home_layout_draft)

def db_publish_layout(db: Session, store_id: str, layout: list) -> None:
    if not store_id:
        raise LayoutPublishError("Store ID is required to publish layout.")
    if not layout:
        raise LayoutPublishError("Cannot publish an empty layout.")
    store = db_get_store(db, store_id)
    if store is None:
        raise LookupError(f"Store {store_id!r} introuvable")
    store.home_layout_published = jd(layout)
    store.updated_at = datetime.utcnow()
    db.commit()


# ── Catalogue (sélecteurs de l'éditeur) ──
def db_list_locations(db: Session, store_id: str) -> List[LocationDB]:
    return db.query(LocationDB).filter_by(store_id=store_id).all()

def db_list_categories(db: Session, store_id: str) -> List[CategoryDB]:
    if not store_id:
        return []
    return db.query(CategoryDB).filter_by(store_id=store_id).order_by(CategoryDB.name).all()

def db_list_featured_tags(db: Session, store_id: str) -> List[FeaturedTagDB]:
    if not store_id:
        return []
    return db.query(FeaturedTagDB).filter_by(store_id=store_id).order_by(FeaturedTagDB.name).all()


# ── Settings ──
def db_get_store_settings(db: Session, store_id: str) -> Optional[StoreSettingsDB]:
    """Absence de réglages = pas une erreur."""
    if not store_id:
        return None
    return db.query(StoreSettingsDB).filter_by(store_id=store_id).first()

def db_get_app_settings(db: Session) -> Optional[AppSettingsDB]:
    return db.query(AppSettingsDB).order_by(AppSettingsDB.id).first()
