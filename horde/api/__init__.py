"""FastAPI diagnostics and control API."""
