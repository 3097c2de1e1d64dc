from . import entities, frameworks, measurements, metrics, periods, sources, tags

__all__ = [
    "entities",
    "frameworks",
    "measurements",
    "metrics",
    "periods",
    "sources",
    "tags",
]
