"""
通用数据模型

定义与具体网盘无关的统一数据结构
"""
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import BinaryIO, Dict, Optional


class SessionState(Enum):
    """会话状态"""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    EXPIRED = "expired"
    REFRESHING = "refreshing"
    REAUTHENTICATING = "reauthenticating"


@dataclass(frozen=True)
class FileItem:
    """统一文件项模型

    创建后不可修改，需要更新时使用 dataclasses.replace 生成副本。
    不保存父目录 ID，父目录由调用方的上下文决定。
    """
    id: str                          # 文件唯一标识符
    name: str                        # 文件名
    size: int                        # 文件大小（字节），文件夹为 0
    modified_at: datetime            # 修改时间（UTC）
    is_folder: bool = False          # 是否是文件夹

    @property
    def type_name(self) -> str:
        """远端 API 使用的类型字段值"""
        return "folder" if self.is_folder else "file"


@dataclass
class AuthToken:
    """认证令牌"""
    access_token: str                    # 访问令牌
    refresh_token: Optional[str] = None  # 刷新令牌
    expires_at: float = 0.0              # 过期时间（Unix 时间戳）
    token_type: str = "Bearer"           # 令牌类型

    def is_expired(self, now: Optional[float] = None, buffer_seconds: int = 0) -> bool:
        """检查令牌是否过期

        Args:
            now: 当前时间（默认 time.time()）
            buffer_seconds: 提前多少秒判定为过期
        """
        if now is None:
            now = time.time()
        return now >= (self.expires_at - buffer_seconds)


@dataclass
class DownloadInfo:
    """下载信息"""
    url: str                                  # 下载 URL
    expires_at: Optional[float] = None        # 过期时间（远端不提供）
    headers: Optional[Dict[str, str]] = None  # 下载时需要携带的请求头


@dataclass(frozen=True)
class UploadSession:
    """上传会话（first_upload 的结果，仅在一次上传内有效）"""
    content_hash: str
    csrf_token: str
    file_key: str


@dataclass
class UploadStream:
    """待上传的文件流

    size 未知时为 -1，以实际读取的字节数为准。
    """
    name: str
    reader: BinaryIO
    size: int = -1
