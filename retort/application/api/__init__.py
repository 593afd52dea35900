"""HTTP API: routes, dependencies, middleware and models."""
