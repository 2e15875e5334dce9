"""
核心抽象层

导出核心接口和数据模型
"""

from .models import (
    SessionState,
    FileItem,
    AuthToken,
    DownloadInfo,
    UploadSession,
    UploadStream,
)

from .exceptions import (
    CloudStorageError,
    ConfigError,
    TransportError,
    AuthenticationError,
    ApplicationError,
    DecodeError,
    LinkUnavailableError,
    UploadInitError,
    NotSupportedError,
    ProviderNotSupportedError,
)

from .auth import AuthProvider, SessionManager, mask_token
from .provider import CloudStorageProvider, ProgressCallback

__all__ = [
    # 模型
    "SessionState",
    "FileItem",
    "AuthToken",
    "DownloadInfo",
    "UploadSession",
    "UploadStream",
    # 异常
    "CloudStorageError",
    "ConfigError",
    "TransportError",
    "AuthenticationError",
    "ApplicationError",
    "DecodeError",
    "LinkUnavailableError",
    "UploadInitError",
    "NotSupportedError",
    "ProviderNotSupportedError",
    # 接口
    "AuthProvider",
    "SessionManager",
    "mask_token",
    "CloudStorageProvider",
    "ProgressCallback",
]
