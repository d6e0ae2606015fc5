"""HTTP API: a background EngineManager plus FastAPI routes over it."""
