# service/github_store.py
# GitHub contents API 作为远端文档存储（版本号即 blob sha）
import base64
import logging
from datetime import datetime, timezone
from typing import Optional

import httpx

from service.errors import ConflictError, DocumentNotFound, TransportError
from service.remote import DocumentStore, RemoteDocument

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class GitHubContentsStore(DocumentStore):
    """
    repo 形如 "owner/name"，token 为 Personal Access Token。
    二者都是调用方提供的不透明字符串，这里既不保存也不校验。
    传入 client 时复用它（测试时可注入 MockTransport），否则每次请求新建。
    """

    def __init__(self, repo: str, token: str, branch: Optional[str] = None,
                 api_url: str = GITHUB_API_URL, timeout: float = 30.0,
                 client: Optional[httpx.AsyncClient] = None):
        self.repo = repo
        self.token = token
        self.branch = branch
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.client = client

    def _url(self, path: str) -> str:
        return f"{self.api_url}/repos/{self.repo}/contents/{path}"

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            if self.client is not None:
                return await self.client.request(
                    method, self._url(path), headers=self._headers(), **kwargs
                )
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(
                    method, self._url(path), headers=self._headers(), **kwargs
                )
        except httpx.RequestError as e:
            raise TransportError(f"GitHub 请求失败: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            data = None
        message = data.get("message") if isinstance(data, dict) else None
        return message or response.reason_phrase or str(response.status_code)

    async def get(self, path: str) -> RemoteDocument:
        params = {"ref": self.branch} if self.branch else None
        response = await self._request("GET", path, params=params)

        if response.status_code == 404:
            raise DocumentNotFound(f"{self.repo}/{path} 不存在")
        if not response.is_success:
            raise TransportError(
                f"GitHub API Error: {self._error_message(response)}",
                status_code=response.status_code,
            )

        data = response.json()
        # GitHub 返回的 base64 带换行，b64decode 默认会忽略
        content = base64.b64decode(data.get("content", ""))
        return RemoteDocument(content=content, version=data["sha"])

    async def put(self, path: str, content: bytes, version: Optional[str]) -> str:
        body = {
            "message": f"Update progress: {datetime.now(timezone.utc).isoformat()}",
            "content": base64.b64encode(content).decode("ascii"),
        }
        if version is not None:
            body["sha"] = version
        if self.branch:
            body["branch"] = self.branch

        response = await self._request("PUT", path, json=body)

        if response.status_code == 409:
            raise ConflictError(f"GitHub 拒绝写入（版本冲突）: {self._error_message(response)}")
        if response.status_code == 422:
            message = self._error_message(response)
            # 未带 sha 而文件已存在时 GitHub 返回 422
            if "sha" in message.lower():
                raise ConflictError(f"GitHub 拒绝写入（版本冲突）: {message}")
            raise TransportError(f"GitHub API Error: {message}", status_code=422)
        if not response.is_success:
            raise TransportError(
                f"GitHub API Error: {self._error_message(response)}",
                status_code=response.status_code,
            )

        new_version = response.json()["content"]["sha"]
        logger.debug("已写入 %s/%s，新版本 %s", self.repo, path, new_version)
        return new_version
