# controller/session_controller.py
# 刷题会话：持有本次会话标记的增量，负责串行化保存
import logging
from enum import Enum, auto

from service.errors import SessionStateError
from service.selector import SelectionMode

logger = logging.getLogger(__name__)


class SessionState(Enum):
    INIT = auto()
    CATALOG_LOADED = auto()
    PROGRESS_LOADED = auto()
    SAVING = auto()


class DrillSession:
    def __init__(self, index, completion_store, selector):
        self.index = index
        self.completion = completion_store
        self.selector = selector
        self.session_done = set()
        self.state = SessionState.CATALOG_LOADED if index is not None else SessionState.INIT

    # ---------- 查询 ----------
    def is_completed(self, question_id):
        return self.completion.is_done(question_id)

    def is_marked(self, question_id):
        return question_id in self.session_done

    def can_save(self):
        return self.state != SessionState.SAVING

    def _ensure_idle(self, action):
        # 保存进行中 master 处于乐观合并状态，不允许读写
        if self.state == SessionState.SAVING:
            raise SessionStateError(f"保存进行中，不能{action}")

    # ---------- 抽题 ----------
    def generate(self, n, category=None, subcategory=None, mode=SelectionMode.RANDOM):
        self._ensure_idle("抽题")
        if self.index is None:
            raise SessionStateError("题目目录尚未加载")

        pool = self.index.candidates(category, subcategory, exclude=self.completion.master)
        return self.selector.select(pool, n, mode, category_pinned=category is not None)

    # ---------- 标记 ----------
    def mark_done(self, question_id):
        self._ensure_idle("标记题目")
        if self.completion.is_done(question_id):
            return False
        if self.index is not None and question_id not in self.index:
            logger.warning("未知题目 id: %s", question_id)
            return False
        self.session_done.add(question_id)
        return True

    def unmark(self, question_id):
        self._ensure_idle("取消标记")
        self.session_done.discard(question_id)

    # ---------- 同步 ----------
    async def load_progress(self):
        self._ensure_idle("重新加载")
        result = await self.completion.load()
        # 已经同步过的条目不再留在增量中
        self.session_done -= self.completion.master
        self.state = SessionState.PROGRESS_LOADED
        return result

    async def save_progress(self):
        if not self.can_save():
            raise SessionStateError("上一次保存尚未完成")

        snapshot = set(self.session_done)
        previous = self.state
        self.state = SessionState.SAVING
        try:
            result = await self.completion.save(snapshot)
        finally:
            self.state = previous

        if not result.skipped:
            # 只移除本次已持久化的条目
            self.session_done -= snapshot
        return result
