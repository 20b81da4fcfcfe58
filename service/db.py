# db.py
import sqlite3
from threading import Lock


class DatabaseManager:
    # 每个数据库文件一个实例
    _instances = {}
    _lock = Lock()

    def __new__(cls, db_path="drill.db"):
        with cls._lock:
            instance = cls._instances.get(db_path)
            if instance is None:
                instance = super().__new__(cls)
                instance.conn = sqlite3.connect(
                    db_path,
                    check_same_thread=False
                )
                instance.conn.execute("PRAGMA journal_mode=WAL;")
                instance.conn.execute("PRAGMA synchronous=NORMAL;")
                instance.lock = Lock()
                cls._instances[db_path] = instance
        return instance

    def execute(self, sql, params=()):
        with self.lock:
            cur = self.conn.cursor()
            cur.execute(sql, params)
            self.conn.commit()
            return cur

    def fetchall(self, sql, params=()):
        with self.lock:
            return self.conn.execute(sql, params).fetchall()

    def transaction(self):
        """
        返回持锁的事务上下文：块内语句一起提交，异常时回滚。
        用法: with db.transaction() as conn: ...
        """
        return _Transaction(self)

    def close(self):
        with DatabaseManager._lock:
            for path, instance in list(DatabaseManager._instances.items()):
                if instance is self:
                    del DatabaseManager._instances[path]
        self.conn.close()


class _Transaction:
    def __init__(self, db):
        self.db = db

    def __enter__(self):
        self.db.lock.acquire()
        return self.db.conn

    def __exit__(self, exc_type, exc, tb):
        try:
            if exc_type is None:
                self.db.conn.commit()
            else:
                self.db.conn.rollback()
        finally:
            self.db.lock.release()
        return False
