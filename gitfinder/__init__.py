"""gitfinder — find local git repositories that were never pushed."""

__version__ = "0.3.0"
