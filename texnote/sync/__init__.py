"""
Synchronization of the in-memory collection with storage. Changes are
debounced so bursts of edits produce a single remote write, and sync health
is tracked as a {obj}`SyncStatus`.
"""

from pyrollup import rollup

from . import scheduler
from .scheduler import *  # noqa

__all__ = rollup(scheduler)
