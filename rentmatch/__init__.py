"""Pricing and ranking engine for the rental marketplace."""

__version__ = "0.1.0"
