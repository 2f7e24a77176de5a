"""
Bill Tracker - Source Package

Tracks recurring household bills and the payments made against them,
and derives status, dashboard summaries and spending analytics from
a small local dataset.

DESIGN PRINCIPLES:
1. Payments are the single source of truth
2. Status is always derived, never stored and trusted
3. Analytics never fail on empty data
4. Failed writes never corrupt the in-memory state
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Bill Tracker Team"
