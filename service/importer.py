# service/importer.py
# 题目目录导入：JSON 嵌套结构，或 CSV / Excel 扁平表
import csv
import json
from pathlib import Path
from typing import List, Dict, Optional

from openpyxl import load_workbook

from service.errors import CatalogLoadError


class CatalogImporter:
    REQUIRED_COLUMNS = {"category", "subcategory", "label"}

    # ========= 对外统一入口 =========
    def import_from_file(self, file_path: str, root_key: Optional[str] = None) -> Dict[str, Dict[str, list]]:
        path = Path(file_path)
        if not path.exists():
            raise CatalogLoadError(f"目录文件不存在: {path}")

        suffix = path.suffix.lower()

        if suffix == ".json":
            catalog = self._read_json(path)
            if root_key:
                if not isinstance(catalog, dict) or root_key not in catalog:
                    raise CatalogLoadError(f"目录中缺少根节点: {root_key}")
                catalog = catalog[root_key]
        elif suffix == ".csv":
            catalog = self._group(self._read_csv(path))
        elif suffix in (".xlsx", ".xlsm"):
            catalog = self._group(self._read_excel(path))
        else:
            raise CatalogLoadError(f"不支持的文件格式: {suffix}")

        self._check_structure(catalog)
        return catalog

    # ========= JSON =========
    def _read_json(self, path: Path):
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise CatalogLoadError(f"无法读取 {path}: {e}") from e

    # ========= CSV =========
    def _read_csv(self, path: Path) -> List[Dict]:
        with open(path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            headers = set(reader.fieldnames or [])

            self._check_headers(headers)

            return list(reader)

    # ========= Excel =========
    def _read_excel(self, path: Path) -> List[Dict]:
        try:
            wb = load_workbook(path, read_only=True)
        except Exception as e:
            raise CatalogLoadError(f"无法读取 {path}: {e}") from e
        ws = wb.active

        rows = list(ws.iter_rows(values_only=True))
        wb.close()
        if not rows:
            return []

        headers = [str(h).strip() for h in rows[0]]
        self._check_headers(set(headers))

        return [dict(zip(headers, row)) for row in rows[1:]]

    # ========= 校验 =========
    def _check_headers(self, headers: set):
        if not self.REQUIRED_COLUMNS.issubset(headers):
            missing = self.REQUIRED_COLUMNS - headers
            raise CatalogLoadError(f"缺少字段: {missing}")

    def _check_structure(self, catalog):
        # 只检查层级形状，不校验内容
        if not isinstance(catalog, dict):
            raise CatalogLoadError("目录顶层应为 类别 → 子类别 → 标签列表 的映射")
        for category, subcategories in catalog.items():
            if not isinstance(subcategories, dict):
                raise CatalogLoadError(f"类别 {category} 应为 子类别 → 标签列表 的映射")
            for subcategory, labels in subcategories.items():
                if not isinstance(labels, list):
                    raise CatalogLoadError(f"{category}/{subcategory} 应为标签列表")

    # ========= 分组 =========
    @staticmethod
    def _group(rows: List[Dict]) -> Dict[str, Dict[str, list]]:
        catalog = {}
        for r in rows:
            label = r.get("label")
            if label is None or str(label).strip() == "":
                continue
            category = str(r["category"]).strip()
            subcategory = str(r["subcategory"]).strip()
            catalog.setdefault(category, {}).setdefault(subcategory, []).append(str(label).strip())
        return catalog
