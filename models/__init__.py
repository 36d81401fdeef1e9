"""
Models package: exposes the DBStorage singleton as `models.storage`.

The engine is created by storage.reload(), which create_app() calls with the
configured DATABASE_URL.
"""
from models.db_storage import DBStorage

storage = DBStorage()
