"""
ContentLab - content-marketing backend.

This package contains the core modules for the ContentLab service:
- normalization: Webhook/LLM response normalization into canonical content bundles
- webhooks: n8n webhook client and webhook URL resolution
- collectors: Keyword data sources (SEMrush)
- services: OpenAI-backed content suggestion generation
- library: Supabase-backed content library and listing cache
- core: Exceptions and the in-process event bus
- monitoring: Prometheus metrics
- api: FastAPI application and endpoints
- config: Pydantic settings and configuration
"""

__version__ = "0.1.0"
