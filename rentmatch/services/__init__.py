"""Pricing, insight, parsing and ranking services."""
