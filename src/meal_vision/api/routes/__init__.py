"""API routes."""

from . import analyze, auth

__all__ = ["analyze", "auth"]
