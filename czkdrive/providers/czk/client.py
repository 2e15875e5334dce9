"""
CZK 网盘 API 客户端

封装 CZK API 调用细节，不涉及认证逻辑
"""
import logging
from typing import Any, Dict, Optional

import requests

from ...core.exceptions import TransportError
from .config import ConfigCZK, RequestOptions, default_config
from .envelope import Envelope, EnvelopeFamily, decode_envelope

logger = logging.getLogger(__name__)


class ClientCZK:
    """CZK 网盘 API 客户端（纯 API 调用层）

    不包含认证逻辑，由调用方提供 access_token。
    读操作使用查询参数，写操作使用 multipart/form-data。
    """

    def __init__(self, config: ConfigCZK = None, session: Optional[requests.Session] = None):
        self.config = config or default_config
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = self.config.USER_AGENT

    def close(self) -> None:
        self.session.close()

    def request(
        self,
        path: str,
        family: EnvelopeFamily,
        method: str = 'GET',
        access_token: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        fields: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        options: Optional[RequestOptions] = None,
    ) -> Envelope:
        """发送 API 请求并解码响应信封

        不检查信封中的业务状态码，由调用方决定如何处理。

        Args:
            path: 接口路径
            family: 接口族
            method: HTTP 方法
            access_token: 访问令牌（作为 Bearer 发送）
            params: 查询参数
            fields: multipart 表单字段
            headers: 额外请求头
            options: 单次请求配置（超时等）

        Returns:
            Envelope: 响应信封

        Raises:
            TransportError: 网络错误或 HTTP 状态码不为 200
            DecodeError: 响应不是合法的 JSON 对象
        """
        url = self.config.url(path)
        options = options or self.config.default_options

        request_headers = dict(headers or {})
        if access_token:
            request_headers["Authorization"] = f"Bearer {access_token}"

        files = None
        if fields is not None:
            # (None, value) 让 requests 以普通表单字段编码
            files = {k: (None, str(v)) for k, v in fields.items() if v is not None}

        try:
            response = self.session.request(
                method,
                url,
                params=params,
                files=files,
                headers=request_headers,
                timeout=options.timeout,
            )
        except requests.exceptions.Timeout as e:
            logger.warning(f"Request to {url} timed out after {options.timeout}s")
            raise TransportError(f"Request to {path} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"Network error during call to {url}: {e}")
            raise TransportError(f"Failed to send request to {path}: {e}") from e

        if response.status_code != 200:
            logger.error(f"Request to {url} failed with status {response.status_code}: {response.text[:200]}")
            raise TransportError(
                f"Request to {path} failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        envelope = decode_envelope(response.content, family)
        logger.debug(f"{method} {path} -> code={envelope.code}, message={envelope.message}")
        return envelope

    # ==================== 认证 API ====================

    def authenticate(self, api_key: str, api_secret: str) -> Envelope:
        """用 API 密钥换取令牌"""
        return self.request(
            self.config.AUTHENTICATE_PATH,
            EnvelopeFamily.AUTH,
            'GET',
            headers={"x-api-key": api_key, "x-api-secret": api_secret},
        )

    def refresh_token(self, refresh_token: str) -> Envelope:
        """用刷新令牌换取新的访问令牌"""
        return self.request(
            self.config.REFRESH_TOKEN_PATH,
            EnvelopeFamily.AUTH,
            'POST',
            fields={"refresh_token": refresh_token},
        )

    # ==================== 文件 API ====================

    def list_files(self, access_token: str, folder_id: str) -> Envelope:
        """获取目录下的文件列表"""
        return self.request(
            self.config.LIST_FILES_PATH,
            EnvelopeFamily.ITEM,
            'GET',
            access_token,
            params={"folder_id": folder_id},
        ).raise_for_code()

    def get_download_url(self, access_token: str, file_id: str) -> Envelope:
        """获取文件下载链接"""
        return self.request(
            self.config.DOWNLOAD_URL_PATH,
            EnvelopeFamily.TRANSFER,
            'GET',
            access_token,
            params={"file_id": file_id},
        ).raise_for_code()

    def create_folder(self, access_token: str, parent_id: str, name: str) -> Envelope:
        """创建文件夹"""
        return self.request(
            self.config.CREATE_FOLDER_PATH,
            EnvelopeFamily.ITEM,
            'POST',
            access_token,
            fields={"parent_id": parent_id, "name": name},
        ).raise_for_code()

    def move_item(self, access_token: str, item_id: str, item_type: str, target_id: str) -> Envelope:
        """移动文件/文件夹"""
        return self.request(
            self.config.MOVE_ITEM_PATH,
            EnvelopeFamily.ITEM,
            'POST',
            access_token,
            fields={"id": item_id, "type": item_type, "target_id": target_id},
        ).raise_for_code()

    def rename_item(self, access_token: str, item_id: str, item_type: str, new_name: str) -> Envelope:
        """重命名文件/文件夹"""
        return self.request(
            self.config.RENAME_ITEM_PATH,
            EnvelopeFamily.ITEM,
            'POST',
            access_token,
            fields={"id": item_id, "type": item_type, "new_name": new_name},
        ).raise_for_code()

    def delete_item(self, access_token: str, item_id: str, item_type: str) -> Envelope:
        """删除文件/文件夹"""
        return self.request(
            self.config.DELETE_ITEM_PATH,
            EnvelopeFamily.ITEM,
            'POST',
            access_token,
            fields={"id": item_id, "type": item_type},
        ).raise_for_code()

    # ==================== 上传 API ====================

    def init_upload(
        self,
        access_token: str,
        content_hash: str,
        filename: str,
        filesize: int,
        folder_id: str
    ) -> Envelope:
        """初始化上传，返回 csrf_token 和 file_key"""
        return self.request(
            self.config.UPLOAD_INIT_PATH,
            EnvelopeFamily.TRANSFER,
            'POST',
            access_token,
            fields={
                "hash": content_hash,
                "filename": filename,
                "filesize": filesize,
                "folder": folder_id,
            },
            options=self.config.upload_options,
        ).raise_for_code()

    def complete_upload(
        self,
        access_token: str,
        content_hash: str,
        filename: str,
        filesize: int,
        csrf_token: str,
        file_key: str,
        folder_id: str
    ) -> Envelope:
        """完成上传"""
        return self.request(
            self.config.UPLOAD_COMPLETE_PATH,
            EnvelopeFamily.TRANSFER,
            'POST',
            access_token,
            fields={
                "hash": content_hash,
                "filename": filename,
                "filesize": filesize,
                "csrf_token": csrf_token,
                "file_key": file_key,
                "folder": folder_id,
            },
            options=self.config.upload_options,
        ).raise_for_code()
