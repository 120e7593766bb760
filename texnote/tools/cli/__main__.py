"""
Entry point of `texnote` CLI when run as `python -m texnote.tools.cli`.
"""

from .main import run

run()
