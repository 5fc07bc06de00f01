"""
ContentLab FastAPI Application.

This module contains the REST API for ContentLab:

- main: FastAPI application entry point and configuration
- routes/: API endpoint definitions organized by domain
- models: Pydantic request/response models
- dependencies: FastAPI dependency injection providers

API Structure:
- /health - Health check and readiness probes
- /metrics - Prometheus metrics
- /api/v1/content - Normalization, n8n workflows, OpenAI suggestions
- /api/v1/keywords - SEMrush keyword research
- /api/v1/library - Content library

Example:
    from contentlab.api.main import app

    # Run with: uvicorn contentlab.api.main:app --reload
"""

from contentlab.api.main import app

__all__ = ["app"]
