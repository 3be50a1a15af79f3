"""
db/ - Database Layer
====================
PostgreSQL connection pool and schema creation.
The lowest layer; depends only on config and logging.
"""
