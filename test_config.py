"""
配置模块测试
"""
import logging

from czkdrive.config import (
    CZKSettings,
    Settings,
    get_settings,
    load_yaml_config,
    setup_logging,
)
from czkdrive.providers.czk import ConfigCZK, ProviderCZK


def test_defaults(monkeypatch):
    for key in ("CZK_API_KEY", "CZK_API_SECRET", "CZK_ROOT_FOLDER_ID", "CZK_TIMEOUT"):
        monkeypatch.delenv(key, raising=False)

    settings = CZKSettings()

    assert settings.api_key == ""
    assert settings.root_folder_id == "0"
    assert settings.base_url == "https://pan.szczk.top/czkapi"
    assert settings.timeout == 30
    assert settings.upload_timeout == 600


def test_from_env(monkeypatch):
    monkeypatch.setenv("CZK_API_KEY", "env-key")
    monkeypatch.setenv("CZK_API_SECRET", "env-secret")
    monkeypatch.setenv("CZK_ROOT_FOLDER_ID", "15")
    monkeypatch.setenv("CZK_UPLOAD_TIMEOUT", "1200")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    settings = Settings()

    assert settings.czk.api_key == "env-key"
    assert settings.czk.api_secret == "env-secret"
    assert settings.czk.root_folder_id == "15"
    assert settings.czk.upload_timeout == 1200
    assert settings.log.level == "DEBUG"


def test_yaml_fills_missing_env(monkeypatch, tmp_path):
    # load_yaml_config 直接写 os.environ，先经 monkeypatch 登记以便结束后恢复
    for key in ("CZK_API_KEY", "CZK_API_SECRET", "CZK_ROOT_FOLDER_ID", "LOG_LEVEL"):
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setenv("CZK_API_SECRET", "from-env")

    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        "czk:\n"
        "  api_key: from-yaml\n"
        "  api_secret: ignored\n"
        "  root_folder_id: 3\n"
        "log:\n"
        "  level: WARNING\n",
        encoding="utf-8",
    )

    assert load_yaml_config(str(config_file))

    settings = get_settings()
    assert settings.czk.api_key == "from-yaml"
    assert settings.czk.api_secret == "from-env"
    assert settings.czk.root_folder_id == "3"
    assert settings.log.level == "WARNING"
    get_settings.cache_clear()


def test_yaml_missing_file(tmp_path):
    assert not load_yaml_config(str(tmp_path / "absent.yaml"))


def test_provider_from_settings():
    settings = CZKSettings(
        api_key="k",
        api_secret="s",
        root_folder_id="9",
        base_url="https://example.test/api/",
        timeout=5,
        upload_timeout=50,
        user_agent="tester",
    )

    provider = ProviderCZK.from_settings(settings)

    assert provider.root_folder_id == "9"
    assert provider.config.url("/list_files") == "https://example.test/api/list_files"
    assert provider.config.default_options.timeout == 5
    assert provider.config.upload_options.timeout == 50
    assert provider.client.session.headers["User-Agent"] == "tester"
    provider.drop()


def test_config_from_settings_keeps_endpoints():
    config = ConfigCZK.from_settings(CZKSettings(base_url="https://x"))
    assert config.url(config.UPLOAD_COMPLETE_PATH) == "https://x/ok_upload"


def test_setup_logging(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    settings = Settings()
    settings.log.level = "debug"
    setup_logging(settings)

    assert calls["level"] == logging.DEBUG
    assert calls["format"] == settings.log.format
