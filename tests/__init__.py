# tests/__init__.py
"""
Test suite for the measurement store.

Organization:
- `core`: service-level tests against a fresh in-memory SQLite database.
- `http_api`: FastAPI routes, status codes and the error envelope.
"""
