"""API layer - FastAPI routers, middleware and request coercion."""
