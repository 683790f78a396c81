"""Bootstrap wiring: builds concrete dependencies from the environment."""
