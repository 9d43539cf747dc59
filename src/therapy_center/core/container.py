# src/therapy_center/core/container.py
"""
Dependency Injection Container

Builds the document store adapter selected by configuration and hands it to
every service by constructor injection. Services never look up a store on
their own.

Usage:
    from therapy_center.core.container import container

    sessions = container.session_service()
"""

import logging
from typing import Optional

from ..config import TherapyCenterConfig, get_config
from .ports.store import DocumentStorePort

logger = logging.getLogger(__name__)


class Container:
    """
    Dependency injection container.

    Provides factory methods for the store and the services.
    Instances are cached; reset() drops them.
    """

    def __init__(
        self,
        config: Optional[TherapyCenterConfig] = None,
        store: Optional[DocumentStorePort] = None,
    ):
        self._config = config
        self._store_instance = store
        self._services = {}

    @property
    def config(self) -> TherapyCenterConfig:
        if self._config is None:
            self._config = get_config()
        return self._config

    # =============================================================================
    # STORE
    # =============================================================================

    def store(self) -> DocumentStorePort:
        """
        Get the document store instance.

        Returns the memory, SQLite or Supabase adapter based on config.store_type.
        """
        if self._store_instance is None:
            cfg = self.config
            if cfg.store_type == "memory":
                from ..adapters.store.memory import InMemoryDocumentStore
                self._store_instance = InMemoryDocumentStore(batch_limit=cfg.batch_limit)
            elif cfg.store_type == "sqlite":
                from ..adapters.store.sqlite import SQLiteDocumentStore
                self._store_instance = SQLiteDocumentStore(cfg.sqlite_path, batch_limit=cfg.batch_limit)
            elif cfg.store_type == "supabase":
                from ..adapters.store.supabase import SupabaseDocumentStore
                self._store_instance = SupabaseDocumentStore(
                    url=cfg.supabase_url or None,
                    key=cfg.supabase_key or None,
                    table=cfg.supabase_documents_table,
                    batch_limit=cfg.batch_limit,
                )
            else:
                raise ValueError(f"Unknown store type: {cfg.store_type}")
            logger.info(f"Document store ready: {cfg.store_type}")
        return self._store_instance

    # =============================================================================
    # SERVICES
    # =============================================================================

    def _cached(self, name: str, factory):
        if name not in self._services:
            self._services[name] = factory()
        return self._services[name]

    def session_service(self):
        from ..services.sessions import SessionService
        return self._cached("sessions", lambda: SessionService(self.store()))

    def form_service(self):
        from ..services.forms import FormService
        return self._cached(
            "forms",
            lambda: FormService(self.store(), form_link_base=self.config.form_link_base),
        )

    def kid_service(self):
        from ..services.kids import KidService
        return self._cached("kids", lambda: KidService(self.store()))

    def team_service(self):
        from ..services.team import TeamService
        return self._cached("team", lambda: TeamService(self.store()))

    def goal_service(self):
        from ..services.goals import GoalService
        return self._cached("goals", lambda: GoalService(self.store()))

    def notification_service(self):
        from ..services.notifications import NotificationService
        return self._cached("notifications", lambda: NotificationService(self.store()))

    def board_request_service(self):
        from ..services.board_requests import BoardRequestService
        return self._cached("board_requests", lambda: BoardRequestService(self.store()))

    def admin_service(self):
        from ..services.admins import AdminService
        return self._cached("admins", lambda: AdminService(self.store()))

    # =============================================================================
    # LIFECYCLE
    # =============================================================================

    def reset(self):
        """Reset all cached instances (useful for testing)."""
        self._store_instance = None
        self._services = {}

    def configure(
        self,
        config: Optional[TherapyCenterConfig] = None,
        store: Optional[DocumentStorePort] = None,
    ):
        """Swap configuration and/or store; cached services are rebuilt on next use."""
        if config is not None:
            self._config = config
        self._store_instance = store
        self._services = {}


# Global container instance
container = Container()
