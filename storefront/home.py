"""
Page d'accueil — passe complète de résolution pour une location.

    location → marque (store_id) → layout publié → resolve_layout
                                 → réglages boutique + app → resolve_theme
                                 → SectionDispatcher

HomePageSession suit la location sélectionnée : un changement de location annule
la passe en cours, et tout résultat d'un contexte périmé est jeté.
"""
import asyncio
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from .content.resolver import ContentSourceResolver
from .datastore import DataStore, DataStoreError, Filter
from .dispatcher import RenderableSection, SectionDispatcher
from .layout.resolver import resolve_layout_document
from .theme.resolver import ThemeColors, resolve_theme

log = logging.getLogger(__name__)

NO_LOCATION_TITLE = "Choose a Location"
DEFAULT_LOCATION_TITLE = "Location Home"


class HomePage(BaseModel):
    location_id: Optional[str] = None
    brand_id: Optional[str] = None
    store_name: str = NO_LOCATION_TITLE
    logo_url: Optional[str] = None
    theme: ThemeColors
    sections: List[Optional[RenderableSection]] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def rendered_sections(self) -> List[RenderableSection]:
        return [s for s in self.sections if s is not None]


class HomePageService:
    def __init__(self, store: DataStore, resolver: Optional[ContentSourceResolver] = None):
        self.store = store
        self.resolver = resolver or ContentSourceResolver(store)
        self.dispatcher = SectionDispatcher(self.resolver)

    async def _theme_sources(self, brand_id: Optional[str]):
        """(theme_store, app_theme, logo_url) ; un échec de lecture dégrade vers les défauts."""
        store_theme = app_theme = logo_url = None
        try:
            app_row = await self.store.fetch_one("app_settings")
            app_theme = app_row.get("theme") if app_row else None
        except DataStoreError as e:
            log.warning("app_settings illisible : %s", e)
        if brand_id:
            try:
                settings = await self.store.fetch_one("store_settings", [Filter(field="store_id", value=brand_id)])
            except DataStoreError as e:
                log.warning("store_settings %s illisible : %s", brand_id, e)
                settings = None
            if settings:
                store_theme = settings.get("theme_store")
                logo_url = settings.get("logo_url")
        return store_theme, app_theme, logo_url

    async def build(self, location_id: Optional[str]) -> HomePage:
        if not location_id:
            _, app_theme, _ = await self._theme_sources(None)
            return HomePage(theme=resolve_theme(None, app_theme))

        log.info("Passe home pour la location %s", location_id)
        try:
            location = await self.store.fetch_one("locations", [Filter(field="id", value=location_id)])
        except DataStoreError as e:
            log.error("Location %s : %s", location_id, e)
            _, app_theme, _ = await self._theme_sources(None)
            return HomePage(location_id=location_id, theme=resolve_theme(None, app_theme), error=str(e))
        if location is None:
            _, app_theme, _ = await self._theme_sources(None)
            return HomePage(location_id=location_id, theme=resolve_theme(None, app_theme),
                            error="Selected location not found.")

        brand_id = location.get("store_id")
        store_theme, app_theme, logo_url = await self._theme_sources(brand_id)
        page = HomePage(
            location_id=location_id,
            brand_id=brand_id,
            store_name=location.get("name") or DEFAULT_LOCATION_TITLE,
            logo_url=logo_url,
            theme=resolve_theme(store_theme, app_theme),
        )
        if not brand_id:
            log.info("Location %s sans marque : layout vide", location_id)
            return page

        try:
            store = await self.store.fetch_one("stores", [Filter(field="id", value=brand_id)])
        except DataStoreError as e:
            log.error("Layout de la marque %s : %s", brand_id, e)
            page.error = str(e)
            return page

        raw_layout = store.get("home_layout_published") if store else None
        sections = resolve_layout_document(raw_layout, location_id)
        if not sections:
            log.warning("Aucune section applicable pour la location %s", location_id)
        page.sections = await self.dispatcher.dispatch(sections, brand_id, location_id, page.theme)
        return page


class HomePageSession:
    """
    Location courante + passe en vol.

    Chaque appel à select_location() ouvre une nouvelle génération : la tâche
    précédente est annulée, et un résultat qui arrive pour une génération
    dépassée est ignoré (retour None).
    """

    def __init__(self, service: HomePageService):
        self.service = service
        self.location_id: Optional[str] = None
        self.page: Optional[HomePage] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    def cancel(self):
        if self._task is not None and not self._task.done():
            log.info("Annulation de la passe en cours (location %s)", self.location_id)
            self._task.cancel()

    async def select_location(self, location_id: Optional[str]) -> Optional[HomePage]:
        self.cancel()
        self._generation += 1
        generation = self._generation
        self.location_id = location_id

        task = asyncio.ensure_future(self.service.build(location_id))
        self._task = task
        try:
            page = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                log.info("Passe %d remplacée par la passe %d", generation, self._generation)
                return None
            raise
        if generation != self._generation:
            log.warning("Résultat périmé ignoré (location %s)", location_id)
            return None
        self.page = page
        return page

    async def refresh(self) -> Optional[HomePage]:
        """Relance la passe pour la location courante (bouton « Retry »)."""
        return await self.select_location(self.location_id)
