"""Top-level package for lestorant.

Watches torrent RSS feeds, matches new releases against subscriptions and
saves their torrents locally or hands them to aria2 over JSON-RPC.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
