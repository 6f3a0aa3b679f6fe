"""
Retarget: bulk conditional rewriting of records behind a management UI.

Scans a record listing, opens the editor of every row whose destination
equals an expected value, rewrites it, and verifies each save.
"""

__version__ = "0.1.0"
