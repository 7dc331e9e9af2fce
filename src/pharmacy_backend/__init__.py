"""Pharmacy backend data layer.

Entity handlers with a relational query interface (where / include /
orderBy / pagination) translated onto a PostgREST row-store over HTTP.

Modules:
- rowstore: Supabase client factory and single-row request helper
- orm: entity mapping, query translation and per-entity handlers
- config: settings from environment and .env
"""

__version__ = "0.1.0"
