"""HTTP layer: FastAPI dependencies, error handlers and versioned routers."""
