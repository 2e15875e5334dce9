"""
CZK 网盘 Provider

导出 ProviderCZK 并自动注册到工厂
"""
from .provider import ProviderCZK
from .auth import AuthCZK
from .client import ClientCZK
from .config import ConfigCZK, RequestOptions, default_config
from .envelope import Envelope, EnvelopeFamily, decode_envelope
from ..factory import provider_factory

# 自动注册到工厂
provider_factory.register("czk", ProviderCZK)

__all__ = [
    "ProviderCZK",
    "AuthCZK",
    "ClientCZK",
    "ConfigCZK",
    "RequestOptions",
    "default_config",
    "Envelope",
    "EnvelopeFamily",
    "decode_envelope",
]
