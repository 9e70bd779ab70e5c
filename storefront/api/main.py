"""
STOREFRONT — FastAPI app
Démarrer : uvicorn storefront.api.main:app --reload --port 8002
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import LOG_LEVEL
from .routes import home, layout_admin

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s — %(message)s")
log = logging.getLogger(__name__)

app = FastAPI(title="STOREFRONT — Layout Engine", version="0.1.0", docs_url="/docs")

app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

app.include_router(home.router)
app.include_router(layout_admin.router)


@app.on_event("startup")
def startup():
    from ..database import init_db
    init_db()
    log.info("DB initialisée (SQLite)")


@app.get("/health")
def health():
    return {"status": "ok", "service": "storefront", "version": "0.1.0"}
