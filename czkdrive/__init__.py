"""
CZK 网盘虚拟文件系统适配器

把 CZK 网盘 API 封装为统一的文件系统对象存储接口
"""

# 导出核心接口和数据模型
from .core import (
    # 数据模型
    SessionState,
    FileItem,
    AuthToken,
    DownloadInfo,
    UploadSession,
    UploadStream,
    # 异常
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
    # 接口
    AuthProvider,
    SessionManager,
    CloudStorageProvider,
)

# 导出 Provider 工厂
from .providers import ProviderFactory, provider_factory

# 导出配置
from .config import Settings, CZKSettings, LogSettings, get_settings, load_yaml_config, setup_logging

# 自动导入所有 Provider（触发自动注册）
from .providers import czk  # noqa: F401
from .providers.czk import ProviderCZK

__all__ = [
    # 核心
    "SessionState",
    "FileItem",
    "AuthToken",
    "DownloadInfo",
    "UploadSession",
    "UploadStream",
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
    "AuthProvider",
    "SessionManager",
    "CloudStorageProvider",
    # Providers
    "ProviderFactory",
    "provider_factory",
    "ProviderCZK",
    # 配置
    "Settings",
    "CZKSettings",
    "LogSettings",
    "get_settings",
    "load_yaml_config",
    "setup_logging",
]

__version__ = "1.0.0"
