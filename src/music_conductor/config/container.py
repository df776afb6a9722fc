"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the credential store, Spotify adapters, domain
services and the playback orchestrator. Components are created on-demand and
cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ..application.interfaces.authorization_server import AuthorizationServer
    from ..application.interfaces.catalog_client import CatalogClient
    from ..application.services.credential_store import CredentialStore
    from ..application.services.playback_orchestrator import PlaybackOrchestrator
    from ..application.services.token_service import TokenLifecycleManager
    from ..application.tools import PlaybackTools
    from ..domain.auth.repository import CredentialRepository
    from ..domain.catalog.movements import MovementResolver
    from ..domain.catalog.scoring import MatchScorer, ScoringVocabulary
    from ..infrastructure.persistence.database import Database
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. Any of the
    underscore fields may be pre-set to substitute a component, e.g. a fake
    ``CatalogClient`` in tests.
    """

    settings: Settings

    # Persistence layer
    _database: Database | None = None
    _credential_repository: CredentialRepository | None = None

    # Infrastructure adapters
    _authorization_server: AuthorizationServer | None = None
    _catalog_client: CatalogClient | None = None

    # Domain services
    _scoring_vocabulary: ScoringVocabulary | None = None
    _match_scorer: MatchScorer | None = None
    _movement_resolver: MovementResolver | None = None

    # Application services
    _credential_store: CredentialStore | None = None
    _token_manager: TokenLifecycleManager | None = None
    _orchestrator: PlaybackOrchestrator | None = None
    _tools: PlaybackTools | None = None

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    # === Repositories ===

    @property
    def credential_repository(self) -> CredentialRepository | None:
        """Get the credential repository, or None when persistence is disabled."""
        if self._credential_repository is None and self.settings.database.enabled:
            from ..infrastructure.persistence.repositories.credential_repository import (
                SQLiteCredentialRepository,
            )

            self._credential_repository = SQLiteCredentialRepository(self.database)
        return self._credential_repository

    # === Infrastructure Adapters ===

    @property
    def authorization_server(self) -> AuthorizationServer:
        """Get the Spotify Accounts token endpoint client."""
        if self._authorization_server is None:
            from ..infrastructure.spotify.accounts_client import SpotifyAccountsClient

            self._authorization_server = SpotifyAccountsClient(self.settings.spotify)
        return self._authorization_server

    @property
    def catalog_client(self) -> CatalogClient:
        """Get the Spotify Web API client."""
        if self._catalog_client is None:
            from ..infrastructure.spotify.catalog_client import SpotifyCatalogClient

            self._catalog_client = SpotifyCatalogClient(self.settings.spotify)
        return self._catalog_client

    # === Domain Services ===

    @property
    def scoring_vocabulary(self) -> ScoringVocabulary:
        if self._scoring_vocabulary is None:
            from ..domain.catalog.scoring import ScoringVocabulary

            self._scoring_vocabulary = ScoringVocabulary.classical()
        return self._scoring_vocabulary

    @property
    def match_scorer(self) -> MatchScorer:
        """Get the search-result scorer."""
        if self._match_scorer is None:
            from ..domain.catalog.scoring import MatchScorer

            self._match_scorer = MatchScorer(
                self.scoring_vocabulary,
                low_confidence_threshold=self.settings.playback.low_confidence_threshold,
            )
        return self._match_scorer

    @property
    def movement_resolver(self) -> MovementResolver:
        """Get the movement resolver."""
        if self._movement_resolver is None:
            from ..domain.catalog.movements import MovementResolver

            self._movement_resolver = MovementResolver()
        return self._movement_resolver

    # === Application Services ===

    @property
    def credential_store(self) -> CredentialStore:
        """Get the per-user credential store."""
        if self._credential_store is None:
            from ..application.services.credential_store import CredentialStore

            self._credential_store = CredentialStore(self.credential_repository)
        return self._credential_store

    @property
    def token_manager(self) -> TokenLifecycleManager:
        """Get the token lifecycle manager."""
        if self._token_manager is None:
            from ..application.services.token_service import TokenLifecycleManager

            self._token_manager = TokenLifecycleManager(
                store=self.credential_store,
                authorization_server=self.authorization_server,
                spotify_settings=self.settings.spotify,
                token_settings=self.settings.token,
                catalog_client=self.catalog_client,
            )
        return self._token_manager

    @property
    def orchestrator(self) -> PlaybackOrchestrator:
        """Get the playback orchestrator."""
        if self._orchestrator is None:
            from ..application.services.playback_orchestrator import PlaybackOrchestrator

            self._orchestrator = PlaybackOrchestrator(
                token_manager=self.token_manager,
                catalog_client=self.catalog_client,
                scorer=self.match_scorer,
                movement_resolver=self.movement_resolver,
                settings=self.settings.playback,
            )
        return self._orchestrator

    @property
    def tools(self) -> PlaybackTools:
        """Get the chat-facing tool facade."""
        if self._tools is None:
            from ..application.tools import PlaybackTools

            self._tools = PlaybackTools(self.orchestrator)
        return self._tools

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources."""
        if self.settings.database.enabled:
            await self.database.initialize()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        for name, component in (
            ("catalog client", self._catalog_client),
            ("accounts client", self._authorization_server),
        ):
            close = getattr(component, "close", None)
            if close is None:
                continue
            try:
                await close()
            except Exception as exc:
                logger.warning("Failed closing %s: %r", name, exc)

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
