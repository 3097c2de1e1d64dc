"""
Catalyst Core: a shared measurement store.

Records quantitative observations (entity, metric, period, value) with
provenance and confidence, and serves "latest value" and flattened views
of them. See ``catalyst_core.store.MeasurementStore`` for in-process use
and ``catalyst_core.main`` for the HTTP API.
"""

__version__ = "0.1.0"
