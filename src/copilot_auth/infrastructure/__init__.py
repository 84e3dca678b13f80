"""Infrastructure layer: auth primitives, persistence, services and HTTP API."""
