# catalyst_core/repositories/__init__.py
"""
Repository layer public exports.

This package groups the concrete repositories used by the services.
Downstream code can import from this module instead of individual files, e.g.:

    from catalyst_core.repositories import MeasurementsRepository
"""

from .entities import EntitiesRepository
from .frameworks import FrameworksRepository
from .measurements import MeasurementsRepository
from .metrics import MetricsRepository
from .periods import PeriodsRepository
from .sources import SourcesRepository
from .tags import TagsRepository

__all__ = [
    "EntitiesRepository",
    "FrameworksRepository",
    "MeasurementsRepository",
    "MetricsRepository",
    "PeriodsRepository",
    "SourcesRepository",
    "TagsRepository",
]
