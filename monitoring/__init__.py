# PATH: monitoring/__init__.py
"""
Monitoring package for HAWK.

Stable exports:
- ScanStatistics
- format_report
- report_periodically
"""

from monitoring.stats import ScanStatistics, format_report, report_periodically

__all__ = [
    "ScanStatistics",
    "format_report",
    "report_periodically",
]
