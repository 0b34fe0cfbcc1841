"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, linknav.toml only contains
overrides. An empty (or missing) file gives a working configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class CacheConfig(BaseModel):
    """[cache] section.

    Attributes:
        timeout: Milliseconds before a cached LinkSet is stale.
        cleanup_interval: Minutes between background sweeps.
        max_size: Entry count above which the oldest entry is evicted.
        extraction_timeout: Seconds an extraction may run before it fails.
        notice_cooldown: Milliseconds between two cleanup notices.
        show_cleanup_notice: Emit a notice when a sweep removes entries.
    """

    model_config = {"frozen": True}

    timeout: int = Field(default=5 * 60 * 1000, gt=0)
    cleanup_interval: int = Field(default=5, gt=0)
    max_size: int = Field(default=200, gt=0)
    extraction_timeout: float = Field(default=10.0, gt=0)
    notice_cooldown: int = Field(default=5000, ge=0)
    show_cleanup_notice: bool = True


class CanvasConfig(BaseModel):
    """[canvas] section."""

    model_config = {"frozen": True}

    search_links: bool = True
    show_links: bool = True


class TraversalConfig(BaseModel):
    """[traversal] section."""

    model_config = {"frozen": True}

    max_depth: int = Field(default=1, gt=0)
    show_inlink_outlinks: bool = False


class LinkNavConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    cache: CacheConfig = Field(default_factory=CacheConfig)
    canvas: CanvasConfig = Field(default_factory=CanvasConfig)
    traversal: TraversalConfig = Field(default_factory=TraversalConfig)
