"""
Therapy center backend: kids, goals, sessions, session reports and
notifications for pediatric therapy centers.
"""

__version__ = "0.1.0"
