"""
Service container.

Builds the storage gateway and the services that depend on it, and owns
the gateway's lifetime. Construct one per process and close it on
shutdown; nothing here is a module-level singleton.
"""
import logging
from typing import Optional

from todocore.config import Settings
from todocore.services import TodoService
from todocore.storage import TodoGateway, open_gateway
from todocore.tracing import flush_tracing, setup_tracing

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Container for the gateway and services.

    Args:
        settings: Runtime settings; defaults to Settings() (no environment read)
        gateway: Pre-built gateway to use instead of opening one from
            settings.database_url. The container still closes it.

    Raises:
        StorageUnavailableError: If the store cannot be reached or initialized
    """

    def __init__(self, settings: Optional[Settings] = None, gateway: Optional[TodoGateway] = None):
        self.settings = settings or Settings()
        setup_tracing(self.settings)

        self.gateway = gateway
        try:
            if self.gateway is None:
                self.gateway = open_gateway(
                    self.settings.database_url,
                    slow_query_threshold=self.settings.slow_query_threshold,
                )
            self.gateway.initialize()
        except Exception:
            if self.gateway is not None:
                self.gateway.close()
            self._flush_tracing()
            raise

        self.todos = TodoService(self.gateway)
        logger.info(f"Service container ready ({type(self.gateway).__name__})")

    def _flush_tracing(self) -> None:
        if self.settings.tracing_enabled:
            flush_tracing()

    def close(self) -> None:
        """Release the gateway and flush buffered spans.

        The tracer provider is process-wide and outlives the container.
        """
        self.gateway.close()
        self._flush_tracing()
        logger.info("Service container closed")

    def __enter__(self) -> "ServiceContainer":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
