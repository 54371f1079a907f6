"""Listing store backed by CSV data or in-memory records."""
