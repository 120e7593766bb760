"""
Persistence of the note collection to the local cache and the remote store.
"""

from pyrollup import rollup

from . import adapter, config, local, remote
from .adapter import *  # noqa
from .config import *  # noqa
from .local import *  # noqa
from .remote import *  # noqa

__all__ = rollup(config, local, remote, adapter)
