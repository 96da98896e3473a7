"""geoffload - read Geoff graph notation and load it into an entity store."""

__version__ = "0.1.0"
