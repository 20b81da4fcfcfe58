# service/progress.py
# 完成记录同步：本地增量合并进远端主集合（乐观并发，冲突回滚）
import json
import logging
from enum import Enum
from typing import Iterable, NamedTuple, Optional, Set

from service.errors import ConflictError, DocumentFormatError, DocumentNotFound
from service.remote import DocumentStore

logger = logging.getLogger(__name__)


class LoadStatus(Enum):
    LOADED = "loaded"
    NOT_FOUND = "not_found"


class LoadResult(NamedTuple):
    status: LoadStatus
    total: int


class SaveResult(NamedTuple):
    saved: int
    total: int
    skipped: bool = False


def decode_progress(content: bytes) -> Set[str]:
    try:
        items = json.loads(content.decode("utf-8")) if content else []
    except (UnicodeDecodeError, ValueError) as e:
        raise DocumentFormatError(f"进度文件无法解析: {e}") from e

    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise DocumentFormatError("进度文件应为字符串 id 组成的 JSON 数组")
    return set(items)


def encode_progress(done: Iterable[str]) -> bytes:
    # 写入时排序，保证同一集合每次内容一致
    return json.dumps(sorted(done), ensure_ascii=False).encode("utf-8")


class CompletionStore:
    """
    持有主集合 master 与远端版本号。
    同一实例同时最多一个 save 在进行，由调用方保证串行。
    """

    def __init__(self, store: DocumentStore, path: str = "progress.json",
                 max_attempts: int = 1):
        self.store = store
        self.path = path
        self.max_attempts = max(1, max_attempts)
        self.master: Set[str] = set()
        self.version_token: Optional[str] = None

    def is_done(self, question_id: str) -> bool:
        return question_id in self.master

    async def load(self) -> LoadResult:
        try:
            doc = await self.store.get(self.path)
        except DocumentNotFound:
            self.master = set()
            self.version_token = None
            logger.info("未找到 %s，保存时将新建", self.path)
            return LoadResult(LoadStatus.NOT_FOUND, 0)

        # 解析失败时不改动已有状态
        done = decode_progress(doc.content)
        self.master = done
        self.version_token = doc.version
        logger.info("已加载 %d 道已完成题目", len(done))
        return LoadResult(LoadStatus.LOADED, len(done))

    async def save(self, delta: Iterable[str]) -> SaveResult:
        delta = set(delta)
        if not delta:
            return SaveResult(0, len(self.master), skipped=True)

        # 先在本地合并；回滚时只移除本次真正新增的 id
        added = delta - self.master
        self.master |= added

        merged_remote = set()
        try:
            for attempt in range(1, self.max_attempts + 1):
                token, remote_ids = await self._fetch_current(merge=attempt > 1)
                new_ids = remote_ids - self.master
                self.master |= new_ids
                merged_remote |= new_ids

                try:
                    self.version_token = await self.store.put(
                        self.path, encode_progress(self.master), token
                    )
                    break
                except ConflictError:
                    if attempt >= self.max_attempts:
                        raise
                    logger.warning("保存冲突，重试 (%d/%d)", attempt + 1, self.max_attempts)
        except BaseException:
            self.master -= added | merged_remote
            raise

        logger.info("已保存 %d 道新完成题目，共 %d 道", len(added), len(self.master))
        return SaveResult(len(added), len(self.master))

    async def _fetch_current(self, merge: bool):
        """
        重新获取远端版本号，缩小与其他写入方的竞争窗口。
        文档不存在时返回 None（将新建）。merge 为真时同时返回远端已有的 id。
        """
        try:
            doc = await self.store.get(self.path)
        except DocumentNotFound:
            return None, set()
        return doc.version, decode_progress(doc.content) if merge else set()
