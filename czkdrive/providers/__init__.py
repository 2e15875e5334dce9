"""
Providers 包

导出 Provider 工厂
"""

from .factory import ProviderFactory, provider_factory

__all__ = [
    "ProviderFactory",
    "provider_factory",
]
