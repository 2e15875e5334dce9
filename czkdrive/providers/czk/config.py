"""
CZK 网盘特定配置
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...config import CZKSettings


@dataclass(frozen=True)
class RequestOptions:
    """单次请求的配置

    每次调用单独传入，不修改共享的 HTTP 客户端状态。
    """
    timeout: float


@dataclass
class ConfigCZK:
    """CZK 网盘配置"""

    BASE_URL: str = "https://pan.szczk.top/czkapi"

    # 认证端点
    AUTHENTICATE_PATH: str = "/authenticate"
    REFRESH_TOKEN_PATH: str = "/refresh_token"

    # 文件端点
    LIST_FILES_PATH: str = "/list_files"
    DOWNLOAD_URL_PATH: str = "/get_download_url"
    CREATE_FOLDER_PATH: str = "/create_folder"
    MOVE_ITEM_PATH: str = "/move_item"
    RENAME_ITEM_PATH: str = "/rename_item"
    DELETE_ITEM_PATH: str = "/delete_item"
    UPLOAD_INIT_PATH: str = "/first_upload"
    UPLOAD_COMPLETE_PATH: str = "/ok_upload"

    # 网络配置
    USER_AGENT: str = "openlist"
    DEFAULT_TIMEOUT: float = 30
    UPLOAD_TIMEOUT: float = 600

    # 远端在 status 不为 200 时也可能返回这条消息表示认证成功
    AUTH_SUCCESS_MESSAGE: str = "认证成功"
    # 刷新令牌无效时远端返回的消息
    REFRESH_TOKEN_INVALID_MESSAGES: tuple = ("需要提供刷新令牌", "无效或过期的刷新令牌")

    # 计算哈希时的读块大小，以及临时缓冲转存磁盘的阈值
    HASH_CHUNK_SIZE: int = 1024 * 1024
    SPOOL_MAX_SIZE: int = 16 * 1024 * 1024

    def url(self, path: str) -> str:
        return f"{self.BASE_URL.rstrip('/')}{path}"

    @property
    def default_options(self) -> RequestOptions:
        return RequestOptions(timeout=self.DEFAULT_TIMEOUT)

    @property
    def upload_options(self) -> RequestOptions:
        return RequestOptions(timeout=self.UPLOAD_TIMEOUT)

    @classmethod
    def from_settings(cls, settings: "CZKSettings") -> "ConfigCZK":
        """从全局配置构建"""
        return cls(
            BASE_URL=settings.base_url,
            USER_AGENT=settings.user_agent,
            DEFAULT_TIMEOUT=settings.timeout,
            UPLOAD_TIMEOUT=settings.upload_timeout,
        )


# 默认配置实例
default_config = ConfigCZK()
