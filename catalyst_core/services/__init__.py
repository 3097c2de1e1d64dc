from .facts_service import FactsService, parse_order_by
from .latest_service import LatestService
from .periods_service import PeriodsService
from .projection_service import ProjectionService
from .registry_service import RegistryService

__all__ = [
    "FactsService",
    "LatestService",
    "PeriodsService",
    "ProjectionService",
    "RegistryService",
    "parse_order_by",
]
