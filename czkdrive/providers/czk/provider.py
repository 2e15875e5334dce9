"""
CZK 网盘 Provider 实现

实现 CloudStorageProvider 接口
"""
import hashlib
import logging
import tempfile
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import IO, Callable, List, Optional, Tuple

import requests

from ...config import CZKSettings, get_settings
from ...core.auth import SessionManager, mask_token
from ...core.exceptions import (
    CloudStorageError, LinkUnavailableError, UploadInitError
)
from ...core.models import (
    AuthToken, DownloadInfo, FileItem, UploadSession, UploadStream
)
from ...core.provider import CloudStorageProvider, ProgressCallback
from .auth import AuthCZK
from .client import ClientCZK
from .config import ConfigCZK, default_config
from .models import convert_to_file_items, extract_id, format_id, parse_modified

logger = logging.getLogger(__name__)

# ok_upload 可能带回目标文件夹的 folder_id，不能当作新文件的 ID
UPLOADED_ID_KEYS = ("id", "file_id")


class ProviderCZK(CloudStorageProvider):
    """CZK 网盘 Provider

    实现云存储统一接口
    """

    def __init__(
        self,
        api_key: str = "",
        api_secret: str = "",
        root_folder_id: str = "0",
        config: ConfigCZK = None,
        http_session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            api_key: CZK API Key
            api_secret: CZK API Secret
            root_folder_id: 根目录 ID
            config: CZK 配置（可选）
            http_session: 复用的 requests 会话（可选）
            clock: 当前时间函数
        """
        self.config = config or default_config
        self.client = ClientCZK(self.config, http_session)
        auth_provider = AuthCZK(api_key, api_secret, self.client, self.config, clock)
        super().__init__(SessionManager(auth_provider, clock), root_folder_id)

    @classmethod
    def from_settings(cls, settings: Optional[CZKSettings] = None, **kwargs) -> "ProviderCZK":
        """从全局配置创建 Provider"""
        czk = settings or get_settings().czk
        return cls(
            api_key=czk.api_key,
            api_secret=czk.api_secret,
            root_folder_id=czk.root_folder_id,
            config=ConfigCZK.from_settings(czk),
            **kwargs
        )

    @property
    def provider_type(self) -> str:
        return "czk"

    # ==================== 生命周期 ====================

    def init(self) -> None:
        """初始化时立即认证，尽早暴露凭据错误"""
        try:
            self.session.authenticate()
        except CloudStorageError as e:
            logger.error(f"Failed to initialize CZK provider: {e}")
            raise e.in_operation("init")

    def drop(self) -> None:
        self.session.invalidate()
        self.client.close()

    # ==================== 文件操作 ====================

    def list_files(self, folder_id: str) -> List[FileItem]:
        """列出文件夹内容"""
        try:
            token = self.ensure_authenticated()
            envelope = self.client.list_files(token.access_token, folder_id)

            items = envelope.data_dict().get("items")
            if not isinstance(items, list):
                return []

            files = convert_to_file_items(items)
            logger.info(f"Listed {len(files)} items in folder {folder_id}")
            return files

        except CloudStorageError as e:
            logger.error(f"Failed to list files in folder {folder_id}: {e}")
            raise e.in_operation("list")

    def get_download_url(self, file_id: str) -> DownloadInfo:
        """获取文件下载链接

        响应中没有链接时直接失败，调用方拿到空链接也无法继续。
        """
        try:
            token = self.ensure_authenticated()
            envelope = self.client.get_download_url(token.access_token, file_id)

            data = envelope.data_dict()
            url = ""
            for key in ("download_link", "url"):
                value = data.get(key)
                if isinstance(value, str) and value:
                    url = value
                    break

            if not url:
                logger.warning(f"No download link found in response: {envelope.raw}")
                raise LinkUnavailableError(f"No download link returned for file {file_id}")

            return DownloadInfo(
                url=url,
                expires_at=None,
                headers={"User-Agent": self.config.USER_AGENT}
            )

        except CloudStorageError as e:
            logger.error(f"Failed to get download URL for {file_id}: {e}")
            raise e.in_operation("link")

    # ==================== 文件管理 ====================

    def create_folder(self, parent_id: str, name: str) -> FileItem:
        """创建文件夹"""
        try:
            token = self.ensure_authenticated()
            envelope = self.client.create_folder(token.access_token, parent_id, name)

            folder_id = extract_id(envelope.data_dict(), ("folder_id", "id"))

            return FileItem(
                id=folder_id,
                name=name,
                size=0,
                modified_at=_now(),
                is_folder=True
            )

        except CloudStorageError as e:
            logger.error(f"Failed to create folder {name!r} in {parent_id}: {e}")
            raise e.in_operation("create_folder")

    def move(self, item: FileItem, target_folder_id: str) -> FileItem:
        """移动文件/文件夹

        请求成功即视为移动完成，不重新获取对象信息；
        响应中带回了被移动的对象时，使用其名称和时间。
        """
        try:
            token = self.ensure_authenticated()
            envelope = self.client.move_item(
                token.access_token,
                item.id,
                item.type_name,
                target_folder_id
            )

            moved = replace(item, modified_at=_now())

            echoed = envelope.data_dict().get("items")
            if isinstance(echoed, list):
                for entry in echoed:
                    if isinstance(entry, dict) and format_id(entry.get("id")) == item.id:
                        name = entry.get("name")
                        moved = replace(
                            moved,
                            name=name if isinstance(name, str) and name else moved.name,
                            modified_at=parse_modified(entry.get("created_at"))
                        )
                        break

            return moved

        except CloudStorageError as e:
            logger.error(f"Failed to move {item.id} to {target_folder_id}: {e}")
            raise e.in_operation("move")

    def rename(self, item: FileItem, new_name: str) -> FileItem:
        """重命名文件/文件夹"""
        try:
            token = self.ensure_authenticated()
            self.client.rename_item(token.access_token, item.id, item.type_name, new_name)

            return replace(item, name=new_name, modified_at=_now())

        except CloudStorageError as e:
            logger.error(f"Failed to rename {item.id} to {new_name!r}: {e}")
            raise e.in_operation("rename")

    def delete(self, item: FileItem) -> bool:
        """删除文件/文件夹"""
        try:
            token = self.ensure_authenticated()
            self.client.delete_item(token.access_token, item.id, item.type_name)
            return True

        except CloudStorageError as e:
            logger.error(f"Failed to delete {item.id}: {e}")
            raise e.in_operation("delete")

    # ==================== 上传 ====================

    def upload(
        self,
        folder_id: str,
        stream: UploadStream,
        progress: Optional[ProgressCallback] = None
    ) -> FileItem:
        """上传文件（两阶段：first_upload 取得凭据，ok_upload 完成）

        远端只需要文件的哈希和元数据。上传请求使用单独的长超时，
        通过每次请求的配置传入，不影响其他请求。
        """
        try:
            token = self.ensure_authenticated()

            buffer, content_hash, filesize = self._cache_and_hash(stream, progress)
            try:
                upload_session = self._init_upload(token, content_hash, stream.name, filesize, folder_id)

                logger.info(
                    f"Completing upload: filename={stream.name}, filesize={filesize}, "
                    f"folder={folder_id}, csrf_token={mask_token(upload_session.csrf_token)}, "
                    f"file_key={mask_token(upload_session.file_key)}"
                )
                envelope = self.client.complete_upload(
                    token.access_token,
                    upload_session.content_hash,
                    stream.name,
                    filesize,
                    upload_session.csrf_token,
                    upload_session.file_key,
                    folder_id
                )
            finally:
                buffer.close()

            if progress:
                progress(100.0)

            return FileItem(
                id=extract_id(envelope.data_dict(), UPLOADED_ID_KEYS),
                name=stream.name,
                size=filesize,
                modified_at=_now(),
                is_folder=False
            )

        except CloudStorageError as e:
            logger.error(f"Failed to upload {stream.name!r} to {folder_id}: {e}")
            raise e.in_operation("upload")

    def _init_upload(
        self,
        token: AuthToken,
        content_hash: str,
        filename: str,
        filesize: int,
        folder_id: str
    ) -> UploadSession:
        envelope = self.client.init_upload(token.access_token, content_hash, filename, filesize, folder_id)

        data = envelope.data_dict()
        csrf_token = data.get("csrf_token") or ""
        file_key = data.get("file_key") or ""

        if not csrf_token or not file_key:
            raise UploadInitError(
                f"Missing required parameters from init upload response: "
                f"csrf_token={mask_token(csrf_token)}, file_key={mask_token(file_key)}"
            )

        return UploadSession(content_hash=content_hash, csrf_token=csrf_token, file_key=file_key)

    def _cache_and_hash(
        self,
        stream: UploadStream,
        progress: Optional[ProgressCallback]
    ) -> Tuple[IO[bytes], str, int]:
        """读取整个流到临时缓冲并计算 MD5

        Returns:
            (已回到开头的缓冲, MD5 十六进制, 实际字节数)
        """
        md5 = hashlib.md5()
        buffer = tempfile.SpooledTemporaryFile(max_size=self.config.SPOOL_MAX_SIZE)
        read = 0
        try:
            while True:
                chunk = stream.reader.read(self.config.HASH_CHUNK_SIZE)
                if not chunk:
                    break
                md5.update(chunk)
                buffer.write(chunk)
                read += len(chunk)
                if progress and stream.size > 0:
                    progress(min(read * 100.0 / stream.size, 100.0))
            buffer.seek(0)
        except (OSError, ValueError, TypeError) as e:
            buffer.close()
            raise CloudStorageError(f"Failed to read upload stream: {e}") from e

        if stream.size >= 0 and stream.size != read:
            logger.warning(f"Declared size {stream.size} of {stream.name!r} differs from {read} bytes read")

        return buffer, md5.hexdigest(), read


def _now() -> datetime:
    return datetime.now(timezone.utc)
