# service/remote.py
# 带版本号的远端文档存储接口
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional


class RemoteDocument(NamedTuple):
    content: bytes
    version: str


class DocumentStore(ABC):
    """
    单文档的读 / 条件写。
    get 在文档不存在时抛 DocumentNotFound；
    put 在 version 与远端不一致（或 version 为 None 而文档已存在）时抛 ConflictError。
    """

    @abstractmethod
    async def get(self, path: str) -> RemoteDocument:
        ...

    @abstractmethod
    async def put(self, path: str, content: bytes, version: Optional[str]) -> str:
        """写入成功后返回新的版本号"""
        ...
