from typing import Optional

from pkgsearch.core.config import Settings
from pkgsearch.data.index_provider import IndexProvider

_settings: Optional[Settings] = None
_index_provider: Optional[IndexProvider] = None

def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

def get_index_provider() -> IndexProvider:
    global _index_provider
    if _index_provider is None:
        _index_provider = IndexProvider(get_settings())
    return _index_provider

def reset_dependencies() -> None:
    """Forget the process-wide instances (closing any open index)."""
    global _settings, _index_provider
    if _index_provider is not None:
        _index_provider.close()
    _settings = None
    _index_provider = None
