"""
CZK 响应信封解码

CZK 的每个接口都返回 {code|status, message|msg, data} 形式的 JSON，
但不同接口使用的字段名不一致。这里按接口族声明各自接受的字段名，
而不是在每个调用点临时探测。
"""
import json
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ...core.exceptions import ApplicationError, DecodeError

SUCCESS_CODE = 200
UNKNOWN_ERROR = "unknown error"


@dataclass(frozen=True)
class EnvelopeSchema:
    """接口族的字段名约定（按顺序尝试）"""
    code_fields: Tuple[str, ...]
    message_fields: Tuple[str, ...]


class EnvelopeFamily(Enum):
    """接口族"""
    # list / create_folder / move / rename / delete
    ITEM = EnvelopeSchema(code_fields=("code", "status"), message_fields=("message", "msg"))
    # download link / first_upload / ok_upload
    TRANSFER = EnvelopeSchema(code_fields=("status", "code"), message_fields=("message", "msg"))
    # authenticate / refresh_token
    AUTH = EnvelopeSchema(code_fields=("status",), message_fields=("message", "msg"))


@dataclass
class Envelope:
    """一次调用的响应信封，只在本次调用内使用"""
    code: Optional[int]
    message: str
    data: Any
    raw: Dict[str, Any]

    @property
    def ok(self) -> bool:
        """没有状态码或状态码为 200"""
        return self.code is None or self.code == SUCCESS_CODE

    def data_dict(self) -> Dict[str, Any]:
        """data 字段为对象时返回它，否则返回空字典"""
        return self.data if isinstance(self.data, dict) else {}

    def raise_for_code(self, operation: Optional[str] = None) -> "Envelope":
        """状态码不为 200 时抛出 ApplicationError（与 HTTP 状态码无关）"""
        if not self.ok:
            raise ApplicationError(self.code, self.message, operation)
        return self


def _as_code(value: Any) -> Optional[int]:
    # JSON 数字统一截断为整数
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        raise DecodeError(f"Status code is not a finite number: {value}")
    return int(value)


def _reject_constant(name: str) -> Any:
    raise DecodeError(f"Response contains non-standard JSON constant {name}")


def decode_envelope(body: Union[bytes, str], family: EnvelopeFamily) -> Envelope:
    """解析响应体

    Args:
        body: 原始响应体
        family: 接口族，决定状态码和消息的字段名

    Returns:
        Envelope: 解码结果

    Raises:
        DecodeError: 不是合法的 JSON 对象
    """
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(f"Response is not valid UTF-8: {e}") from e

    try:
        raw = json.loads(body, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Failed to parse response: {e}, response body: {body[:200]}") from e

    if not isinstance(raw, dict):
        raise DecodeError(f"Unexpected response type {type(raw).__name__}: {body[:200]}")

    schema: EnvelopeSchema = family.value

    code = None
    for name in schema.code_fields:
        code = _as_code(raw.get(name))
        if code is not None:
            break

    message = UNKNOWN_ERROR
    for name in schema.message_fields:
        value = raw.get(name)
        if isinstance(value, str):
            message = value
            break

    return Envelope(code=code, message=message, data=raw.get("data"), raw=raw)
