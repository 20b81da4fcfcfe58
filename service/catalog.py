# service/catalog.py
# 题目目录：把 类别 → 子类别 → 实例标签 的嵌套结构展开成扁平记录
import logging
import re
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

YEAR_PATTERN = re.compile(r"\b((19|20)\d{2})\b")
VIEWER_URL = "https://camcribs.com/viewer"


class QuestionRecord(NamedTuple):
    id: str
    category: str
    subcategory: str
    label: str

    @property
    def title(self) -> str:
        return f"{self.category} - {self.subcategory} - {self.label}"

    @property
    def year(self) -> Optional[str]:
        """从标签中提取四位年份（19xx / 20xx），没有则返回 None"""
        match = YEAR_PATTERN.search(str(self.label))
        return match.group(1) if match else None

    @property
    def link(self) -> Optional[str]:
        """真题查看链接，标签中没有年份时为 None"""
        year = self.year
        if year is None:
            return None
        return f"{VIEWER_URL}?year=IB&type=tripos&module={self.category}&id=QP_{year}"


def make_question_id(category: str, subcategory: str, label) -> str:
    return f"{category}_{subcategory}_{label}"


def flatten(catalog: Dict[str, Dict[str, list]]) -> List[QuestionRecord]:
    """
    按源顺序展开目录。
    相同输入总是得到相同 id，id 是与完成记录关联的键。
    """
    records = []
    for category, subcategories in catalog.items():
        for subcategory, labels in subcategories.items():
            for label in labels:
                records.append(QuestionRecord(
                    id=make_question_id(category, subcategory, label),
                    category=category,
                    subcategory=subcategory,
                    label=str(label),
                ))
    return records


class CatalogIndex:
    def __init__(self, records: Iterable[QuestionRecord]):
        self._records: Dict[str, QuestionRecord] = {}
        for record in records:
            if record.id in self._records:
                # 后者覆盖前者，只记录不修复
                logger.warning("重复的题目 id，后者覆盖前者: %s", record.id)
            self._records[record.id] = record

    @classmethod
    def from_catalog(cls, catalog: dict) -> "CatalogIndex":
        return cls(flatten(catalog))

    def __len__(self):
        return len(self._records)

    def __iter__(self) -> Iterator[QuestionRecord]:
        return iter(self._records.values())

    def __contains__(self, question_id) -> bool:
        return question_id in self._records

    def get(self, question_id: str) -> Optional[QuestionRecord]:
        return self._records.get(question_id)

    def candidates(self, category=None, subcategory=None, exclude=()) -> List[QuestionRecord]:
        """按类别 / 子类别筛选（None 表示全部），并排除 exclude 中的 id"""
        excluded = set(exclude)
        return [
            r for r in self._records.values()
            if r.id not in excluded
            and (category is None or r.category == category)
            and (subcategory is None or r.subcategory == subcategory)
        ]
