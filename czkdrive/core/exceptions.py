"""
通用异常定义
"""
from typing import List, Optional


class CloudStorageError(Exception):
    """云存储基础异常

    context 记录出错时的操作链，外层在前（如 ["list", "authenticate"]），
    由 Provider 在向上抛出时逐层补充。
    """

    def __init__(self, message: str = "", operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.context: List[str] = [operation] if operation else []

    @property
    def operation(self) -> Optional[str]:
        """最外层的操作名"""
        return self.context[0] if self.context else None

    def in_operation(self, operation: str) -> "CloudStorageError":
        """在最外层补充操作上下文，保留内层已有的上下文"""
        if self.operation != operation:
            self.context.insert(0, operation)
        return self

    def __str__(self) -> str:
        return ": ".join(self.context + [self.message])


class ConfigError(CloudStorageError):
    """配置错误（如缺少 API 密钥）"""
    pass


class TransportError(CloudStorageError):
    """网络层错误（连接失败、超时、非 200 HTTP 状态码）"""

    def __init__(
        self,
        message: str = "",
        status_code: Optional[int] = None,
        operation: Optional[str] = None
    ):
        super().__init__(message, operation)
        self.status_code = status_code


class AuthenticationError(CloudStorageError):
    """认证或刷新令牌被远端拒绝"""
    pass


class ApplicationError(CloudStorageError):
    """响应体中的业务状态码表示失败（与 HTTP 状态码无关）"""

    def __init__(self, code: int, message: str, operation: Optional[str] = None):
        super().__init__(f"API error: code={code}, message={message}", operation)
        self.code = code
        self.remote_message = message


class DecodeError(CloudStorageError):
    """响应体不是合法的 JSON 对象"""
    pass


class LinkUnavailableError(CloudStorageError):
    """响应中没有可用的下载链接"""
    pass


class UploadInitError(CloudStorageError):
    """上传初始化未返回 csrf_token / file_key"""
    pass


class NotSupportedError(CloudStorageError):
    """Provider 不支持的操作"""
    pass


class ProviderNotSupportedError(ConfigError):
    """不支持的 Provider 异常"""
    pass
