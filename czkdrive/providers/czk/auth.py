"""
CZK 网盘认证实现

实现 AuthProvider 接口：API Key + Secret 认证，refresh_token 刷新
"""
import logging
import math
import time
from typing import Callable

from ...core.auth import AuthProvider, mask_token
from ...core.exceptions import (
    AuthenticationError, CloudStorageError, ConfigError
)
from ...core.models import AuthToken
from .client import ClientCZK
from .config import ConfigCZK, default_config
from .envelope import SUCCESS_CODE

logger = logging.getLogger(__name__)


class AuthCZK(AuthProvider):
    """CZK 网盘认证提供者"""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        client: ClientCZK,
        config: ConfigCZK = None,
        clock: Callable[[], float] = time.time
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.client = client
        self.config = config or default_config
        self._clock = clock

    def authenticate(self) -> AuthToken:
        """使用 API Key 和 Secret 获取令牌

        Raises:
            ConfigError: API Key 或 Secret 为空（不会发出请求）
            AuthenticationError: 请求失败或远端拒绝认证
        """
        if not self.api_key or not self.api_secret:
            raise ConfigError("API key or secret not set", "authenticate")

        try:
            envelope = self.client.authenticate(self.api_key, self.api_secret)
        except CloudStorageError as e:
            logger.error(f"Failed to send auth request: {e}")
            raise AuthenticationError(f"Authentication request failed: {e}", "authenticate") from e

        data = envelope.data_dict()
        access_token = data.get("access_token") or ""
        refresh_token = data.get("refresh_token") or ""

        logger.debug(
            f"Auth response: status={envelope.code}, message={envelope.message}, "
            f"access_token={mask_token(access_token)}, refresh_token={mask_token(refresh_token)}, "
            f"expires_in={data.get('expires_in')}"
        )

        # 远端有时 status 不是 200，但消息为认证成功
        if envelope.code != SUCCESS_CODE and envelope.message != self.config.AUTH_SUCCESS_MESSAGE:
            raise AuthenticationError(
                f"Authentication API error: status={envelope.code}, message={envelope.message}",
                "authenticate"
            )

        if not access_token:
            raise AuthenticationError("Authentication succeeded but no access token returned", "authenticate")
        if not refresh_token:
            raise AuthenticationError("Authentication succeeded but no refresh token returned", "authenticate")

        return AuthToken(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=self._clock() + _expires_in(data),
            token_type=data.get("token_type") or "Bearer"
        )

    def refresh_token(self, token: AuthToken) -> AuthToken:
        """刷新访问令牌

        远端没有返回新的 refresh_token 时沿用原来的。
        """
        if not token.refresh_token:
            raise AuthenticationError("No refresh token available, need to re-authenticate", "refresh")

        logger.debug(f"Refreshing token with refresh token: {mask_token(token.refresh_token)}")

        try:
            envelope = self.client.refresh_token(token.refresh_token)
        except CloudStorageError as e:
            logger.error(f"Token refresh request failed: {e}")
            raise AuthenticationError(f"Token refresh request failed: {e}", "refresh") from e

        success = envelope.raw.get("success") is True
        if not success or envelope.code != SUCCESS_CODE:
            message = (
                f"Token refresh API error: status={envelope.code}, "
                f"success={success}, message={envelope.message}"
            )
            if envelope.message in self.config.REFRESH_TOKEN_INVALID_MESSAGES:
                message += ", refresh token may be invalid or expired"
            raise AuthenticationError(message, "refresh")

        data = envelope.data_dict()
        access_token = data.get("access_token") or ""
        if not access_token:
            raise AuthenticationError("Token refresh succeeded but no access token returned", "refresh")

        new_refresh_token = data.get("refresh_token") or ""
        if new_refresh_token:
            logger.info(f"New refresh token received: {mask_token(new_refresh_token)}")

        return AuthToken(
            access_token=access_token,
            refresh_token=new_refresh_token or token.refresh_token,
            expires_at=self._clock() + _expires_in(data),
            token_type=data.get("token_type") or token.token_type
        )


def _expires_in(data: dict) -> float:
    value = data.get("expires_in")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return float(value)
