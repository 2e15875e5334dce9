"""
全局配置模块

使用 Pydantic Settings 管理配置，可选从 config.yaml 补充环境变量
"""
import json
import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_MAPPING = {
    "czk": {
        "api_key": "CZK_API_KEY",
        "api_secret": "CZK_API_SECRET",
        "root_folder_id": "CZK_ROOT_FOLDER_ID",
        "base_url": "CZK_BASE_URL",
        "timeout": "CZK_TIMEOUT",
        "upload_timeout": "CZK_UPLOAD_TIMEOUT",
        "user_agent": "CZK_USER_AGENT",
    },
    "log": {
        "level": "LOG_LEVEL",
        "format": "LOG_FORMAT",
    },
}


class CZKSettings(BaseSettings):
    """CZK 网盘账号配置"""
    model_config = SettingsConfigDict(env_prefix="CZK_", populate_by_name=True)

    api_key: str = Field(default="", alias="CZK_API_KEY")
    api_secret: str = Field(default="", alias="CZK_API_SECRET")

    # 挂载的根目录
    root_folder_id: str = Field(default="0", alias="CZK_ROOT_FOLDER_ID")

    base_url: str = Field(default="https://pan.szczk.top/czkapi", alias="CZK_BASE_URL")

    # 请求超时（秒），上传单独使用更长的超时
    timeout: float = Field(default=30, alias="CZK_TIMEOUT")
    upload_timeout: float = Field(default=600, alias="CZK_UPLOAD_TIMEOUT")

    user_agent: str = Field(default="openlist", alias="CZK_USER_AGENT")


class LogSettings(BaseSettings):
    """日志配置"""
    model_config = SettingsConfigDict(env_prefix="LOG_", populate_by_name=True)

    level: str = Field(default="INFO", alias="LOG_LEVEL")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
        alias="LOG_FORMAT"
    )


class Settings(BaseSettings):
    """应用配置"""

    czk: CZKSettings = Field(default_factory=CZKSettings)

    log: LogSettings = Field(default_factory=LogSettings)


@lru_cache
def get_settings() -> Settings:
    """获取配置实例（缓存）"""
    return Settings()


def _set_env_if_missing(key: str, value: Any) -> None:
    if value is None or key in os.environ:
        return
    if isinstance(value, list):
        os.environ[key] = json.dumps(value)
    elif isinstance(value, bool):
        os.environ[key] = "true" if value else "false"
    else:
        os.environ[key] = str(value)


def load_yaml_config(config_path: str) -> bool:
    """从 YAML 文件补充环境变量（已设置的环境变量优先）

    文件格式::

        czk:
          api_key: xxx
          api_secret: yyy
          root_folder_id: "0"
        log:
          level: DEBUG

    Returns:
        bool: 是否读取了配置文件
    """
    if not os.path.exists(config_path):
        return False

    import yaml

    with open(config_path, "r", encoding="utf-8") as config_file:
        data = yaml.safe_load(config_file) or {}

    if not isinstance(data, dict):
        return False

    for section, mapping in ENV_MAPPING.items():
        values: Dict[str, Any] = data.get(section) or {}
        for key, env_key in mapping.items():
            _set_env_if_missing(env_key, values.get(key))

    get_settings.cache_clear()
    return True


def setup_logging(settings: Optional[Settings] = None) -> None:
    """按配置初始化日志"""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log.level.upper(), logging.INFO),
        format=settings.log.format,
    )
