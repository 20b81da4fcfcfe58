# service/local_store.py
# 本地 SQLite 文档存储，语义与远端一致，离线时使用
import hashlib
from datetime import datetime
from typing import Optional

from service.errors import ConflictError, DocumentNotFound
from service.remote import DocumentStore, RemoteDocument
from service.schema import SchemaInitializer


class SqliteDocumentStore(DocumentStore):
    def __init__(self, db):
        self.db = db
        SchemaInitializer(db).initialize()

    @staticmethod
    def _make_version(revision: int, content: bytes) -> str:
        return hashlib.sha256(
            f"{revision}:".encode("utf-8") + content
        ).hexdigest()

    async def get(self, path: str) -> RemoteDocument:
        rows = self.db.fetchall(
            "SELECT content, version FROM document WHERE path=?",
            (path,)
        )
        if not rows:
            raise DocumentNotFound(f"{path} 不存在")

        content, version = rows[0]
        return RemoteDocument(content=bytes(content), version=version)

    async def put(self, path: str, content: bytes, version: Optional[str]) -> str:
        with self.db.transaction() as conn:
            row = conn.execute(
                "SELECT revision, version FROM document WHERE path=?",
                (path,)
            ).fetchone()

            if row is None:
                if version is not None:
                    raise ConflictError(f"{path} 已被删除，版本 {version} 失效")
                revision = 1
            else:
                current_revision, current_version = row
                if version != current_version:
                    raise ConflictError(f"{path} 版本已变化: {version} != {current_version}")
                revision = current_revision + 1

            new_version = self._make_version(revision, content)
            conn.execute(
                """
                INSERT INTO document (path, content, revision, version, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(path) DO UPDATE SET
                    content=excluded.content,
                    revision=excluded.revision,
                    version=excluded.version,
                    updated_at=excluded.updated_at
                """,
                (path, content, revision, new_version, datetime.now().isoformat())
            )
        return new_version
