"""Configuration models for the live browser agent."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseModel):
    """Settings for the LLM provider."""

    provider: str = Field(default="openai")
    model: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class BrowserConfig(BaseModel):
    """Settings for the headless browser launched per connection."""

    headless: bool = True
    viewport_width: int = 1280
    viewport_height: int = 720
    user_agent: Optional[str] = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        )
    )
    extra_args: list[str] = Field(default_factory=list)
    navigation_timeout: float = Field(
        default=30.0,
        description="Seconds to wait for a navigation to finish loading.",
    )


class FrameConfig(BaseModel):
    """Settings for the background frame stream."""

    interval_ms: int = Field(default=66, description="Delay between capture ticks (~15 fps).")
    image_format: str = Field(default="jpeg")
    quality: int = Field(default=60, ge=1, le=100)


class AgentConfig(BaseModel):
    """Limits for the perceive/decide/act loop."""

    max_steps: int = Field(default=10, ge=1)
    settle_delay: float = Field(default=0.5, description="Pause after each executed action.")
    click_settle_timeout: float = Field(default=3.0)
    scroll_amount: int = Field(default=500)
    snapshot_char_limit: int = Field(default=12000)
    transcript_limit: int = Field(default=50)


class ServerConfig(BaseSettings):
    """Top-level configuration for the WebSocket server."""

    model_config = SettingsConfigDict(
        env_prefix="LIVE_BROWSER_AGENT_",
        env_file=(".env",),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    llm: LLMConfig = Field(default_factory=LLMConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    frames: FrameConfig = Field(default_factory=FrameConfig)
    agent: AgentConfig = Field(default_factory=AgentConfig)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)
    channel_capacity: int = Field(
        default=256,
        description="Maximum number of outbound events buffered per connection.",
    )


def load_config(
    path: Path | None = None,
    *,
    env_file: Path | None = None,
    **overrides: object,
) -> ServerConfig:
    """Load configuration from an optional file and overrides."""

    data: dict[str, Any] = {}
    if path:
        import yaml

        data = yaml.safe_load(path.read_text()) or {}
    if overrides:
        _deep_update(data, overrides)
    settings_kwargs: dict[str, object] = {}
    if env_file is not None:
        settings_kwargs["_env_file"] = env_file
    config = ServerConfig(**data, **settings_kwargs)
    if not data:
        return config

    merged = config.model_dump(mode="python")
    _deep_update(merged, data)
    return ServerConfig.model_validate(merged)


def _deep_update(target: dict[str, Any], updates: Mapping[str, Any]) -> None:
    """Recursively merge ``updates`` into ``target`` in-place."""

    for key, value in updates.items():
        if (
            isinstance(value, Mapping)
            and isinstance(existing := target.get(key), Mapping)
        ):
            nested: dict[str, Any]
            if isinstance(existing, dict):
                nested = existing
            else:
                nested = dict(existing)
            _deep_update(nested, value)
            target[key] = nested
        else:
            target[key] = value
