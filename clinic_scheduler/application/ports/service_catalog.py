from __future__ import annotations

from abc import ABC, abstractmethod

from clinic_scheduler.domain.entities.service import Service


class ServiceCatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_id: str) -> Service | None:
        """Get service by id."""
        raise NotImplementedError

    @abstractmethod
    def list_services(self, active_only: bool = True) -> list[Service]:
        """List services, ordered by name."""
        raise NotImplementedError
