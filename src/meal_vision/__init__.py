"""Meal Vision API - photo-based meal nutrition estimates."""

__version__ = "1.0.0"
