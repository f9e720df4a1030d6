"""
Models package: exposes the process-wide DBStorage instance.
The engine is created when the app factory calls storage.reload().
"""
from models.db_storage import DBStorage

storage = DBStorage()
