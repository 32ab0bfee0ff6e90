"""Project-specific framework utilities.

Configuration parsing, module library loading, catalog export, session replay and
artifact writing. Prompt assembly itself lives in `promptkit`, which must stay
independent of this package.
"""
