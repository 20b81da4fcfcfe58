# selector.py
# 题目选择器（无放回抽题：完全随机 / 按类别轮转均衡）
import random
import hashlib
from enum import Enum
from typing import List, Optional, Sequence

from service.catalog import QuestionRecord


class SelectionMode(Enum):
    RANDOM = "random"
    BALANCED = "balanced"


class QuestionSelector:
    def __init__(self, rng: Optional[random.Random] = None):
        # 不污染全局 random
        self.rng = rng or random.Random()

    @classmethod
    def from_seed(cls, seed_source: str) -> "QuestionSelector":
        seed = hashlib.sha256(seed_source.encode()).hexdigest()
        return cls(random.Random(seed))

    def select(self, pool: Sequence[QuestionRecord], n: int,
               mode: SelectionMode = SelectionMode.RANDOM,
               category_pinned: bool = False) -> List[QuestionRecord]:
        """
        pool 由调用方预先筛选并排除已完成题目，这里不会修改它。
        返回至多 min(n, len(pool)) 道不重复的题目，顺序即抽取顺序。
        """
        if n <= 0 or not pool:
            return []

        # 固定单一类别时只有一个桶，均衡模式等同于随机模式
        if mode is SelectionMode.BALANCED and not category_pinned:
            return self._draw_balanced(pool, n)
        return self._draw_random(pool, n)

    def _draw_random(self, pool, n):
        remaining = list(pool)
        selected = []
        while len(selected) < n and remaining:
            idx = self.rng.randrange(len(remaining))
            selected.append(remaining.pop(idx))
        return selected

    def _draw_balanced(self, pool, n):
        buckets = {}
        for record in pool:
            buckets.setdefault(record.category, []).append(record)

        rotation = list(buckets)
        selected = []
        while len(selected) < n and rotation:
            # 每轮每个非空桶最多贡献一道
            for category in list(rotation):
                if len(selected) >= n:
                    break
                bucket = buckets[category]
                idx = self.rng.randrange(len(bucket))
                selected.append(bucket.pop(idx))
                if not bucket:
                    rotation.remove(category)
        return selected
