"""
Inkmark: mark up a PDF in-session and bake the marks into a new copy.
"""

__version__ = "0.1.0"
