from __future__ import annotations

from clinic_scheduler.application.ports.service_catalog import ServiceCatalogPort
from clinic_scheduler.domain.entities.service import Service
from clinic_scheduler.infrastructure.catalog.service_catalog_data import SERVICE_CATALOG


class ServiceCatalogStore(ServiceCatalogPort):
    def __init__(self, catalog: dict[str, Service] | None = None) -> None:
        self._catalog = SERVICE_CATALOG if catalog is None else catalog

    def get_service(self, service_id: str) -> Service | None:
        normalized_key = service_id.lower().strip()
        return self._catalog.get(normalized_key)

    def list_services(self, active_only: bool = True) -> list[Service]:
        services = [s for s in self._catalog.values() if s.is_active or not active_only]
        return sorted(services, key=lambda s: s.name)
