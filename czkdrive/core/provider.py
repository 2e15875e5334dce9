"""
云存储 Provider 接口

定义宿主程序要求的统一文件系统操作
"""
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional

from .auth import SessionManager
from .exceptions import NotSupportedError
from .models import AuthToken, DownloadInfo, FileItem, UploadStream

# 上传进度回调，参数为 0-100 的百分比
ProgressCallback = Callable[[float], None]


class CloudStorageProvider(ABC):
    """云存储提供者接口

    每个实例对应一个远端账号，会话状态由 SessionManager 持有。
    """

    def __init__(self, session: SessionManager, root_folder_id: str = "0"):
        """
        Args:
            session: 会话管理器
            root_folder_id: 根目录 ID
        """
        self.session = session
        self.root_folder_id = root_folder_id

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """Provider 类型标识（如 "czk"）"""
        pass

    # ==================== 生命周期 ====================

    @abstractmethod
    def init(self) -> None:
        """初始化 Provider（建立连接并认证）

        Raises:
            ConfigError: 凭据未配置
            AuthenticationError: 认证失败
        """
        pass

    def drop(self) -> None:
        """释放 Provider 持有的资源"""
        pass

    # ==================== 文件操作 ====================

    @abstractmethod
    def list_files(self, folder_id: str) -> List[FileItem]:
        """列出文件夹内容

        Args:
            folder_id: 文件夹 ID（根目录通常为 "0"）

        Returns:
            List[FileItem]: 文件列表，空文件夹返回空列表
        """
        pass

    @abstractmethod
    def get_download_url(self, file_id: str) -> DownloadInfo:
        """获取文件下载链接

        Raises:
            LinkUnavailableError: 响应中没有下载链接
        """
        pass

    @abstractmethod
    def create_folder(self, parent_id: str, name: str) -> FileItem:
        """创建文件夹"""
        pass

    @abstractmethod
    def move(self, item: FileItem, target_folder_id: str) -> FileItem:
        """移动文件/文件夹，返回更新后的对象"""
        pass

    @abstractmethod
    def rename(self, item: FileItem, new_name: str) -> FileItem:
        """重命名文件/文件夹，返回更新后的对象"""
        pass

    @abstractmethod
    def delete(self, item: FileItem) -> bool:
        """删除文件/文件夹"""
        pass

    @abstractmethod
    def upload(
        self,
        folder_id: str,
        stream: UploadStream,
        progress: Optional[ProgressCallback] = None
    ) -> FileItem:
        """上传文件

        Args:
            folder_id: 目标文件夹 ID
            stream: 文件流
            progress: 进度回调

        Returns:
            FileItem: 新文件信息
        """
        pass

    # ==================== 压缩包（未实现） ====================

    def get_archive_meta(self, item: FileItem, **kwargs: Any) -> Any:
        raise NotSupportedError("Archive metadata is not supported", "get_archive_meta")

    def list_archive(self, item: FileItem, **kwargs: Any) -> List[FileItem]:
        raise NotSupportedError("Archive listing is not supported", "list_archive")

    def extract(self, item: FileItem, **kwargs: Any) -> DownloadInfo:
        raise NotSupportedError("Archive extraction is not supported", "extract")

    def archive_decompress(
        self,
        item: FileItem,
        target_folder_id: str,
        **kwargs: Any
    ) -> List[FileItem]:
        raise NotSupportedError("Archive decompression is not supported", "archive_decompress")

    def get_details(self) -> Any:
        raise NotSupportedError("Storage details are not supported", "get_details")

    # ==================== 辅助方法 ====================

    def get_root(self) -> FileItem:
        """根目录对象"""
        return FileItem(
            id=self.root_folder_id,
            name="",
            size=0,
            modified_at=datetime.now(timezone.utc),
            is_folder=True
        )

    def ensure_authenticated(self) -> AuthToken:
        """确保已认证（自动刷新令牌）

        Returns:
            AuthToken: 有效令牌

        Raises:
            AuthenticationError: 认证失败
        """
        return self.session.ensure_valid()

    def invalidate_token(self):
        """使令牌失效（强制下次重新认证）"""
        self.session.invalidate()
