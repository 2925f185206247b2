"""Services package"""

from teamhub.services.database import db, Database, DuplicateRecordError

__all__ = ["db", "Database", "DuplicateRecordError"]
