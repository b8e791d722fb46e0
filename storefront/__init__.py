"""Storefront backend: order lifecycle, edit window and deadline warnings."""

__version__ = "1.0.0"
