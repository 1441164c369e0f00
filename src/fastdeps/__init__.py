"""fastdeps: dependency tables and change-impact analysis for source trees."""

__version__ = "0.3.0"
