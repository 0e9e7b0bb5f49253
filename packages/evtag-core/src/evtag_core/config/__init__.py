from .loader import load_config
from .models import (
    DigestSettings,
    EvtagConfig,
    GitSettings,
    SubmoduleSettings,
    TagSettings,
)

__all__ = [
    "DigestSettings",
    "EvtagConfig",
    "GitSettings",
    "SubmoduleSettings",
    "TagSettings",
    "load_config",
]
