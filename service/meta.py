# meta.py
# 目录元数据，即统计出筛选的条件有哪些
class QuestionMetaManager:
    def __init__(self, index):
        self.index = index

    def get_categories(self):
        return list(dict.fromkeys(r.category for r in self.index))

    def get_subcategories(self, category=None):
        return list(dict.fromkeys(
            r.subcategory for r in self.index
            if category is None or r.category == category
        ))

    def count(self, category=None, subcategory=None, exclude=()):
        return len(self.index.candidates(category, subcategory, exclude))
