"""HTTP surface of the virology token service."""
