"""HTTP API: routers, dependencies, schemas and exception handlers."""
