"""Tree Player — read-only renderer for hierarchical content trees."""

__version__ = "0.1.0"
