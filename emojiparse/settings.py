"""Settings for the pattern compiler and the emoji decorator.

Values come from the environment (``EMOJI_`` prefix) with defaults that
match the public twemoji asset layout.
"""

import os
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Flavor = Literal["python", "utf16"]

_DEFAULT_BASE_URL = "https://cdnjs.cloudflare.com/ajax/libs/twemoji/14.0.2/"
_DEFAULT_SIZE = "72x72"
_DEFAULT_IMAGE_TYPE = ".png"
_DEFAULT_CLASS_NAME = "emoji"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    text = raw.strip().lower()
    if text in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if text in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


METRICS_ENABLED: bool = _env_bool("EMOJI_METRICS_ENABLED", True)


class DecoratorSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EMOJI_", extra="ignore")

    base_url: str = Field(default=_DEFAULT_BASE_URL, description="Where image assets live")
    size: str = Field(default=_DEFAULT_SIZE, min_length=1)
    image_type: str = Field(default=_DEFAULT_IMAGE_TYPE)
    class_name: str = Field(default=_DEFAULT_CLASS_NAME, min_length=1)


class CompilerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="EMOJI_", extra="ignore")

    flavor: Flavor = Field(
        default="python",
        description="'python' emits an executable pattern, 'utf16' an embeddable UTF-16 source",
    )
    # An empty category means the table lost a whole class of emoji.
    require_all_categories: bool = Field(default=True)


def get_decorator_settings() -> DecoratorSettings:
    return DecoratorSettings()


def get_compiler_settings() -> CompilerSettings:
    return CompilerSettings()


__all__ = [
    "Flavor",
    "METRICS_ENABLED",
    "DecoratorSettings",
    "CompilerSettings",
    "get_decorator_settings",
    "get_compiler_settings",
]
