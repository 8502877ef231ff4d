"""
newsfan - parallel phrase search across news sources.
"""

__version__ = "1.0.0"
