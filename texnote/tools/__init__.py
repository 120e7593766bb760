"""
Command-line tools built on TexNote.
"""
