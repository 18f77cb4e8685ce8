# src/rankladder/middleware/__init__.py

"""Middleware components for RankLadder API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
