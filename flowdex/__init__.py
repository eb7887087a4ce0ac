"""
Flowdex.

Synchronizes on-chain Flow state into a local, queryable index.
"""

__version__ = "0.1.0"
