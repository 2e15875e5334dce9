"""
认证 Provider 接口与会话管理

AuthProvider 负责与远端交换令牌，SessionManager 负责持有令牌并在
每次请求前保证其有效（过期时先刷新，刷新失败再重新认证）。
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .exceptions import AuthenticationError, CloudStorageError
from .models import AuthToken, SessionState

logger = logging.getLogger(__name__)


def mask_token(token: Optional[str], visible: int = 10) -> str:
    """日志中只显示令牌前缀"""
    if not token:
        return "<empty>"
    return f"{str(token)[:visible]}***"


class AuthProvider(ABC):
    """认证提供者接口"""

    @abstractmethod
    def authenticate(self) -> AuthToken:
        """使用凭据获取新令牌

        Returns:
            AuthToken: 访问令牌

        Raises:
            ConfigError: 凭据未配置
            AuthenticationError: 认证失败
        """
        pass

    @abstractmethod
    def refresh_token(self, token: AuthToken) -> AuthToken:
        """刷新访问令牌

        Args:
            token: 当前令牌

        Returns:
            AuthToken: 新令牌

        Raises:
            AuthenticationError: 刷新失败
        """
        pass


class SessionManager:
    """会话管理器

    状态流转：
        UNAUTHENTICATED -> AUTHENTICATED -> EXPIRED
        EXPIRED -> REFRESHING -> AUTHENTICATED
        REFRESHING 失败 -> REAUTHENTICATING -> AUTHENTICATED

    过期检查是惰性的：只在 ensure_valid() 时进行，没有后台刷新线程。
    """

    def __init__(
        self,
        auth_provider: AuthProvider,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            auth_provider: 认证提供者
            clock: 当前时间函数（Unix 时间戳）
        """
        self.auth_provider = auth_provider
        self._clock = clock
        self._token: Optional[AuthToken] = None
        self._transient: Optional[SessionState] = None
        self._lock = threading.RLock()

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    @property
    def state(self) -> SessionState:
        """当前会话状态"""
        if self._transient is not None:
            return self._transient
        if self._token is None or not self._token.access_token:
            return SessionState.UNAUTHENTICATED
        if self._token.is_expired(self._clock()):
            return SessionState.EXPIRED
        return SessionState.AUTHENTICATED

    def authenticate(self) -> AuthToken:
        """执行完整认证并保存令牌"""
        with self._lock:
            token = self.auth_provider.authenticate()
            self._token = token
            logger.info(
                f"Authenticated, access token: {mask_token(token.access_token)}, "
                f"expires in {int(token.expires_at - self._clock())}s"
            )
            return token

    def refresh(self) -> AuthToken:
        """使用刷新令牌换取新的访问令牌

        Raises:
            AuthenticationError: 没有刷新令牌，或远端拒绝刷新
        """
        with self._lock:
            if self._token is None or not self._token.refresh_token:
                raise AuthenticationError("No refresh token available, need to re-authenticate")

            token = self.auth_provider.refresh_token(self._token)
            self._token = token
            logger.info(f"Token refreshed, access token: {mask_token(token.access_token)}")
            return token

    def ensure_valid(self) -> AuthToken:
        """确保持有有效令牌

        令牌未过期时不发出任何请求。过期后先尝试刷新，刷新因任何原因
        失败都视为从未认证，改为重新认证；只有重新认证失败才抛出异常。

        Returns:
            AuthToken: 有效令牌

        Raises:
            ConfigError: 凭据未配置
            AuthenticationError: 重新认证失败
        """
        with self._lock:
            if self.state is SessionState.AUTHENTICATED:
                return self._token

            try:
                self._transient = SessionState.REFRESHING
                return self.refresh()
            except CloudStorageError as e:
                logger.warning(f"Failed to refresh token: {e}, attempting to re-authenticate")
            finally:
                self._transient = None

            try:
                self._transient = SessionState.REAUTHENTICATING
                return self.authenticate()
            finally:
                self._transient = None

    def invalidate(self) -> None:
        """使令牌失效（强制下次重新认证）"""
        with self._lock:
            self._token = None
