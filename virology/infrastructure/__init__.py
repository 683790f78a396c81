"""Infrastructure layer: adapters, stubs and cross-cutting concerns."""
