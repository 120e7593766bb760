"""
TexNote: a hierarchy of notes kept in a local cache and optionally
synchronized with a remote JSON store.
"""

from pyrollup import rollup

from . import core, storage, sync
from .core import *  # noqa
from .storage import *  # noqa
from .sync import *  # noqa

__all__ = rollup(core, storage, sync)
