from .mapper import (
    CaptureOverrides,
    creature_from_catalog,
    snapshot_creature,
)

__all__ = [
    "CaptureOverrides",
    "creature_from_catalog",
    "snapshot_creature",
]
