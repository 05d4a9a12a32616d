"""Text rendering of gains reports."""

from .table import render_report

__all__ = ["render_report"]
