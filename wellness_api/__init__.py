"""
Wellness API – progress aggregation, mood check-ins and deep work sessions.
"""

__version__ = "0.1.0"
