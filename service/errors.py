# service/errors.py
# 错误分类
from typing import Optional


class StoreError(Exception):
    """远端存储相关错误的基类"""


class DocumentNotFound(StoreError):
    """远端文档不存在：加载时视为空集合，保存时视为新建"""


class TransportError(StoreError):
    """网络或凭据错误，原样抛给调用方，不做内部重试"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConflictError(StoreError):
    """条件写入被拒绝：版本号已过期"""


class DocumentFormatError(StoreError):
    """文档内容不是字符串 id 组成的 JSON 数组"""


class CatalogLoadError(Exception):
    """题目目录不可用或格式错误"""


class SessionStateError(Exception):
    """会话流程错误，例如保存尚未完成时再次保存"""
