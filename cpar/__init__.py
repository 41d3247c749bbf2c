"""
cpar - crop scanned artwork and restore its original aspect ratio.
"""

__version__ = "0.1.0"
