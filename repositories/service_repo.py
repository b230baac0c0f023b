"""
repositories/service_repo.py
----------------------------
Data access layer for billed services.
"""

import threading
import uuid
from dataclasses import replace
from typing import Optional

from models.subscription import Service
from utils.logger import get_logger

logger = get_logger(__name__)


class ServiceRepository:
    """Repository for CRUD operations on services."""

    def __init__(self):
        self._services: dict[str, Service] = {}
        self._lock = threading.Lock()

    def add(self, service: Service) -> Service:
        """Insert a service, assigning an `id` if it has none."""
        saved = service if service.id else replace(service, id=uuid.uuid4().hex)
        with self._lock:
            self._services[saved.id] = saved
        logger.info(f"Added service '{saved.name}' #{saved.id}")
        return saved

    def get_all(self) -> list[Service]:
        with self._lock:
            return list(self._services.values())

    def get_by_id(self, service_id: str) -> Optional[Service]:
        with self._lock:
            return self._services.get(service_id)
