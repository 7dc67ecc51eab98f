"""Infrastructure layer — database engine, schema, migrations, stores.

This layer depends on stdlib, the domain layer, and third-party libs
(SQLAlchemy, Alembic).  It must never import from services, commands,
or output.
"""
