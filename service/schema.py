# service/schema.py

class SchemaInitializer:
    def __init__(self, db):
        self.db = db

    def initialize(self):
        self.db.execute("""
        CREATE TABLE IF NOT EXISTS document (
            path TEXT PRIMARY KEY,
            content BLOB NOT NULL,
            revision INTEGER NOT NULL,
            version TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """)
