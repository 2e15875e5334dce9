"""
CZK 网盘数据模型转换器

将 CZK API 返回的数据转换为统一的核心模型
"""
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ...core.models import FileItem

logger = logging.getLogger(__name__)

# 远端使用的时间格式，如 "2025-06-29 15:37:01"
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

ID_KEYS = ("id", "file_id", "folder_id")
NAME_KEYS = ("name", "filename", "file_name")
FOLDER_TIME_KEYS = ("created_at", "modified")
FILE_TIME_KEYS = ("uploaded_at", "modified")

# fromisoformat 在 3.11 之前只接受 3 位或 6 位小数秒
_FRACTION_RE = re.compile(r"^(.{19})\.(\d+)(.*)$")


def convert_to_file_item(item: Dict[str, Any]) -> FileItem:
    """将 CZK 文件项转换为 FileItem

    Args:
        item: CZK API 返回的文件/文件夹项

    Returns:
        FileItem: 统一的文件项模型
    """
    is_folder = is_folder_item(item)
    time_keys = FOLDER_TIME_KEYS if is_folder else FILE_TIME_KEYS

    return FileItem(
        id=extract_id(item),
        name=_first_str(item, NAME_KEYS),
        size=0 if is_folder else _to_size(item.get("size")),
        modified_at=parse_modified(_first_str(item, time_keys)),
        is_folder=is_folder
    )


def convert_to_file_items(items: List[Any]) -> List[FileItem]:
    """批量转换文件项（跳过不是对象的条目）"""
    return [convert_to_file_item(item) for item in items if isinstance(item, dict)]


def is_folder_item(item: Dict[str, Any]) -> bool:
    """优先使用显式的 is_folder，否则比较 type 字段"""
    flag = item.get("is_folder")
    if isinstance(flag, bool):
        return flag
    return item.get("type") == "folder"


def extract_id(item: Dict[str, Any], keys=ID_KEYS) -> str:
    """提取 ID，数字 ID 转为不带小数部分的字符串"""
    for key in keys:
        value = format_id(item.get(key))
        if value:
            return value
    return ""


def format_id(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, float):
        return f"{value:.0f}"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return ""


def parse_modified(value: Any) -> datetime:
    """解析修改时间

    依次尝试 RFC 3339 和 "YYYY-MM-DD HH:MM:SS"（按 UTC 解释）。
    为空或无法解析时返回当前时间，时间字段损坏不应导致整个列表失败。
    """
    if isinstance(value, str) and value:
        parsed = _parse_rfc3339(value) or _parse_plain(value)
        if parsed is not None:
            return parsed
        logger.debug(f"Unparseable timestamp {value!r}, using current time")
    return datetime.now(timezone.utc)


def _parse_rfc3339(value: str) -> Optional[datetime]:
    text = value.strip()
    # RFC 3339 要求日期和时间之间是 T
    if len(text) < 11 or text[10] not in "Tt":
        return None
    if text[-1] in "Zz":
        text = text[:-1] + "+00:00"
    match = _FRACTION_RE.match(text)
    if match:
        head, fraction, rest = match.groups()
        text = f"{head}.{fraction[:6].ljust(6, '0')}{rest}"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def _parse_plain(value: str) -> Optional[datetime]:
    try:
        return datetime.strptime(value.strip(), DATETIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _first_str(item: Dict[str, Any], keys) -> str:
    for key in keys:
        value = item.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _to_size(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0
