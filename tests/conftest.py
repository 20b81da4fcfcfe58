import pytest

from service.errors import ConflictError, DocumentNotFound, TransportError
from service.remote import DocumentStore, RemoteDocument


class InMemoryStore(DocumentStore):
    """单进程内的文档存储，可注入失败"""

    def __init__(self):
        self.docs = {}
        self.revision = 0
        self.gets = 0
        self.puts = 0
        self.fail_get = None
        self.fail_put = None

    def seed(self, path, content: bytes):
        self.revision += 1
        self.docs[path] = RemoteDocument(content, f"v{self.revision}")

    async def get(self, path):
        self.gets += 1
        if self.fail_get is not None:
            raise self.fail_get
        if path not in self.docs:
            raise DocumentNotFound(path)
        return self.docs[path]

    async def put(self, path, content, version):
        self.puts += 1
        if self.fail_put is not None:
            error, self.fail_put = self.fail_put, None
            raise error
        current = self.docs.get(path)
        if current is None and version is not None:
            raise ConflictError(path)
        if current is not None and current.version != version:
            raise ConflictError(path)
        self.seed(path, content)
        return self.docs[path].version


@pytest.fixture
def memory_store():
    return InMemoryStore()


@pytest.fixture
def sample_catalog():
    return {
        "Chem": {"P1": ["2020", "2021"], "P2": ["2019"]},
        "Bio": {"P1": ["2019", "2022"]},
        "Phys": {"P3": ["Tripos 2018"]},
    }


ENV_NAMES = [
    "DRILL_CATALOG_PATH", "DRILL_CATALOG_ROOT", "DRILL_STORE", "GITHUB_REPO",
    "GITHUB_PAT", "GITHUB_BRANCH", "DRILL_PROGRESS_PATH", "DRILL_SQLITE_PATH",
    "DRILL_HTTP_TIMEOUT", "DRILL_SAVE_ATTEMPTS",
]


@pytest.fixture
def isolated_env(monkeypatch, tmp_path):
    """清空相关环境变量，返回一个空 .env 路径"""
    for name in ENV_NAMES:
        # setenv first so teardown also removes values written by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    empty_env = tmp_path / ".env"
    empty_env.write_text("", encoding="utf-8")
    return str(empty_env)
