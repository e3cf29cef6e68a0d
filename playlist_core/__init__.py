"""
PlayList application package.

Introduces a layered architecture:

  playlist_core/repositories/ : pure I/O: the SQLAlchemy game store and the
                                 JSON preferences file.
  playlist_core/services/     : business logic: category lifecycle, list
                                 projections, search, settings, formatting.

``playlist.py`` is the integration point: it builds the repositories and
services once and hands them to the CLI commands, which never touch the
database directly.
"""
