"""Reporting for administrators."""
from .platform import PlatformAnalytics, PlatformSummary

__all__ = ["PlatformAnalytics", "PlatformSummary"]
