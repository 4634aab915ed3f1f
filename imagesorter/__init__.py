"""imagesorter - find duplicate files by content and keep one copy of each."""

__version__ = "0.1.0"
