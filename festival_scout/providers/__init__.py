"""Concrete adapters for the interfaces in ``festival_scout.interfaces``."""
