"""
驱动注册表

宿主程序按类型名（如 "czk"）查找并创建 Provider，
各驱动包在导入时把自己登记进来。
"""
from typing import Dict, List, Type

from ..core.exceptions import ProviderNotSupportedError
from ..core.provider import CloudStorageProvider


class ProviderFactory:
    """类型名 -> Provider 类"""

    def __init__(self):
        self._providers: Dict[str, Type[CloudStorageProvider]] = {}

    def register(self, provider_type: str, provider_class: Type[CloudStorageProvider]) -> None:
        self._providers[provider_type] = provider_class

    def create(self, provider_type: str, **kwargs) -> CloudStorageProvider:
        """按类型名创建 Provider，kwargs 原样传给构造函数

        Raises:
            ProviderNotSupportedError: 类型未登记
        """
        try:
            provider_class = self._providers[provider_type]
        except KeyError:
            raise ProviderNotSupportedError(
                f"Unknown provider type {provider_type!r}, registered: {self.get_supported_types()}",
                "create_provider"
            ) from None
        return provider_class(**kwargs)

    def get_supported_types(self) -> List[str]:
        return sorted(self._providers)


provider_factory = ProviderFactory()
