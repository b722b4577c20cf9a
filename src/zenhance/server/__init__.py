"""ASGI server integration: request handling, error pages, dev server."""
