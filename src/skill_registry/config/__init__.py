"""Configuration overlays and their resolution into effective options."""

from .overlay import ConfigOverlay, OverlayStore, load_overlay, overlay_candidates
from .resolver import EffectiveConfig, resolve_config

__all__ = [
    "ConfigOverlay",
    "EffectiveConfig",
    "OverlayStore",
    "load_overlay",
    "overlay_candidates",
    "resolve_config",
]
