"""
OtakuTrack: a terminal tracker for anime-watching progress.
"""

__version__ = "1.0.0"
