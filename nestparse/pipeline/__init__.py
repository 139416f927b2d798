"""Matching, node construction and the parse driver."""

from .driver import parse

__all__ = ["parse"]
