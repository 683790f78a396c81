"""Domain layer for the virology token service.

Holds the test order model, its lifecycle rules, token generation and
the domain errors. Nothing here depends on infrastructure.
"""
