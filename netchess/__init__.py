"""Two-player chess over TCP: board rules, FEN, commands, a save database, client and server."""

__version__ = "0.1.0"
__all__ = ["__version__"]