"""
ContentLab Test Suite.

- unit/: Normalization pipeline, collectors, webhook client, library and events
- integration/: API endpoint tests through FastAPI's TestClient
- conftest.py: Shared fixtures and test configuration

Run tests with: pytest
Run with coverage: pytest --cov=contentlab
"""
