"""
This module implements the note hierarchy: the flat note collection, its
materialized tree, the operations which change it and the session in which
those changes are made and synchronized.
"""

from pyrollup import rollup

from . import exceptions, mutations, note, seed, snapshot, store, tree, utils
from .exceptions import *  # noqa
from .mutations import *  # noqa
from .note import *  # noqa
from .seed import *  # noqa
from .snapshot import *  # noqa
from .store import *  # noqa
from .tree import *  # noqa
from .utils import *  # noqa

from . import session  # isort: skip
from .session import *  # noqa  # isort: skip

__all__ = rollup(
    session,
    note,
    store,
    tree,
    mutations,
    snapshot,
    seed,
    exceptions,
    utils,
)
