"""festival_scout: festival lineup crawling, artist identity resolution and recommendations."""

__version__ = "0.1.0"
