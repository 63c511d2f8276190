"""
municipal-requests: in-memory multi-index engine for municipal service requests.

The package keeps one authoritative list of service requests and several
ordered indices over it (ticket, creation time, location, urgency), together
with a small depot network used for traversal and minimum spanning tree
queries.

Importing the package has no side effects: no config loading and no logging
setup happen at import time.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
