# service/config.py
# 运行配置：从 .env / 环境变量读取
import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from service.db import DatabaseManager
from service.github_store import GitHubContentsStore
from service.local_store import SqliteDocumentStore


class ConfigError(Exception):
    """配置缺失或不合法"""


NULLABLE_FIELDS = {"catalog_root", "github_repo", "github_pat", "github_branch"}


class DrillSettings(BaseModel):
    """运行参数"""
    catalog_path: str = Field(default="IB.json", description="题目目录文件路径")
    catalog_root: Optional[str] = Field(default="michaelmas", description="JSON 目录的根节点，空则不下钻")
    store: Literal["github", "sqlite"] = Field(default="github", description="进度存储后端")
    github_repo: Optional[str] = Field(default=None, description="owner/repo")
    github_pat: Optional[str] = Field(default=None, description="GitHub Personal Access Token")
    github_branch: Optional[str] = Field(default=None, description="写入的分支，空则默认分支")
    progress_path: str = Field(default="progress.json", description="进度文件在仓库中的路径")
    sqlite_path: str = Field(default="drill.db", description="本地存储的数据库文件")
    http_timeout: float = Field(default=30.0, description="HTTP 超时（秒）", gt=0)
    save_attempts: int = Field(default=1, description="保存冲突时的最多尝试次数", ge=1, le=5)


def load_settings(env_file: Optional[str] = None) -> DrillSettings:
    load_dotenv(env_file)  # 加载项目根目录的 .env 文件

    mapping = {
        "catalog_path": "DRILL_CATALOG_PATH",
        "catalog_root": "DRILL_CATALOG_ROOT",
        "store": "DRILL_STORE",
        "github_repo": "GITHUB_REPO",
        "github_pat": "GITHUB_PAT",
        "github_branch": "GITHUB_BRANCH",
        "progress_path": "DRILL_PROGRESS_PATH",
        "sqlite_path": "DRILL_SQLITE_PATH",
        "http_timeout": "DRILL_HTTP_TIMEOUT",
        "save_attempts": "DRILL_SAVE_ATTEMPTS",
    }
    values = {}
    for field, env_name in mapping.items():
        value = os.getenv(env_name)
        if value is None:
            continue
        value = value.strip()
        if value:
            values[field] = value
        elif field in NULLABLE_FIELDS:
            # 空字符串表示显式关闭该项
            values[field] = None
    return DrillSettings(**values)


def build_store(settings: DrillSettings):
    if settings.store == "sqlite":
        return SqliteDocumentStore(DatabaseManager(settings.sqlite_path))

    if not settings.github_repo or not settings.github_pat:
        raise ConfigError("需要同时提供 GITHUB_REPO 与 GITHUB_PAT")
    return GitHubContentsStore(
        repo=settings.github_repo,
        token=settings.github_pat,
        branch=settings.github_branch,
        timeout=settings.http_timeout,
    )
