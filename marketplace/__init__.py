"""Marketplace catalog backend: item/category store and content-addressed image store."""

__version__ = "1.0.0"
