"""Configuration management for recette."""

import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field

from .constants import (
    CONFIG_FILENAME,
    DEFAULT_SETTLE_DELAY,
    EXPORT_FALLBACK_NAME,
    EXPORT_FILENAME_PREFIX,
)

DEFAULT_TOOLBAR = [
    "header",
    "bold",
    "italic",
    "underline",
    "strike",
    "color",
    "background",
    "blockquote",
    "code-block",
    "list",
    "link",
    "image",
    "clean",
]


class RenderConfig(BaseModel):
    """Configuration for the rendering pipeline and print backends."""

    page_size: str = "A4"
    settle_delay: float = Field(
        default=DEFAULT_SETTLE_DELAY, ge=0, description="Seconds to wait before a snapshot"
    )
    footer_label: str = "Cahier de recette"


class EditorConfig(BaseModel):
    """Configuration for rich-text editing surfaces."""

    toolbar: list[str] = Field(
        default_factory=lambda: list(DEFAULT_TOOLBAR), description="Toolbar capabilities"
    )


class ExportConfig(BaseModel):
    """Configuration for document export naming."""

    filename_prefix: str = EXPORT_FILENAME_PREFIX
    fallback_name: str = EXPORT_FALLBACK_NAME


class RecetteConfig(BaseModel):
    """Root configuration for recette."""

    render: RenderConfig = Field(default_factory=RenderConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)


def load_config(directory: Path) -> RecetteConfig:
    """Load config from recette.toml.

    Args:
        directory: Directory holding recette.toml

    Returns:
        Loaded configuration, or defaults if recette.toml doesn't exist
    """
    config_path = directory / CONFIG_FILENAME
    if not config_path.exists():
        return RecetteConfig()
    with open(config_path, "rb") as f:
        data = tomllib.load(f)
    return RecetteConfig.model_validate(data)


def write_config_template(directory: Path) -> Path:
    """Write default recette.toml template.

    Args:
        directory: Directory to write recette.toml into

    Returns:
        Path to the written config file
    """
    config_path = directory / CONFIG_FILENAME
    template = {
        "render": {
            "page_size": "A4",
            "settle_delay": DEFAULT_SETTLE_DELAY,
            "footer_label": "Cahier de recette",
        },
        "editor": {"toolbar": list(DEFAULT_TOOLBAR)},
        "export": {
            "filename_prefix": EXPORT_FILENAME_PREFIX,
            "fallback_name": EXPORT_FALLBACK_NAME,
        },
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path
