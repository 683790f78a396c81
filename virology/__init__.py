"""
Virology - home test kit token service

Issues, tracks and redeems single-use virology test tokens for the
exposure-notification mobile client:

- Order and register home test kits (CTA token + polling token)
- Poll for result availability without consuming it
- Exchange a CTA token exactly once for the test result
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
