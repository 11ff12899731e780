# Path: config/settings.py
# Purpose: Provide typed application configuration models.
# Layer: config.
# Details: Loads the TOML config file, validates it with pydantic, and checks the home folder.

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import ConfigError
from core.models.domain import DerivativeMarkers, Dimensions

logger = logging.getLogger(__name__)


class HomeSettings(BaseModel):
    """Location of the photo folder and how often it may be rescanned."""

    path: Path = Field(description="Root folder containing the photos to serve.")
    min_refresh_interval: int = Field(
        default=5, ge=1, description="Minimum number of seconds between two rescans of the home folder."
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


class ServerSettings(BaseModel):
    """HTTP listener and page settings."""

    listen_addr: str = Field(default=":8080", description="host:port to listen on; an empty host means all interfaces.")
    title: str = Field(default="My Album", description="Title shown on the album page.")
    shutdown_grace_period: int = Field(
        default=10, ge=0, description="Seconds in-flight requests get to finish during shutdown."
    )

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("listen_addr")
    @classmethod
    def _check_listen_addr(cls, value: str) -> str:
        _split_listen_addr(value)
        return value

    @property
    def host(self) -> str:
        return _split_listen_addr(self.listen_addr)[0]

    @property
    def port(self) -> int:
        return _split_listen_addr(self.listen_addr)[1]


class ImageResizingSettings(BaseModel):
    """Derivative generation parameters. Zero width or height leaves that axis unconstrained."""

    enabled: bool = Field(default=True, description="Generate derivatives; when off, originals are served.")
    background: bool = Field(
        default=False, description="Start serving originals immediately and optimise in the background."
    )
    cleanup_on_shutdown: bool = Field(default=False, description="Delete derivative files when the server stops.")
    preview_width: int = Field(default=600, ge=0)
    preview_height: int = Field(default=600, ge=0)
    resized_width: int = Field(default=1920, ge=0)
    resized_height: int = Field(default=1080, ge=0)
    resized_file_extension: str = Field(
        default="optimised", min_length=1, description="Marker tag inserted into optimised file names."
    )
    preview_file_extension: str = Field(
        default="preview", min_length=1, description="Marker tag inserted into preview file names."
    )
    allowed_extensions: List[str] = Field(
        default_factory=lambda: ["png", "jpeg", "jpg", "svg", "gif"],
        min_length=1,
        description="File extensions treated as photos (case-insensitive).",
    )
    workers: int = Field(default=0, ge=0, description="Optimiser worker threads; 0 uses the CPU count.")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def markers(self) -> DerivativeMarkers:
        return DerivativeMarkers(optimised=self.resized_file_extension, preview=self.preview_file_extension)

    @property
    def optimised_size(self) -> Dimensions:
        return Dimensions(width=self.resized_width, height=self.resized_height)

    @property
    def preview_size(self) -> Dimensions:
        return Dimensions(width=self.preview_width, height=self.preview_height)


class AppSettings(BaseModel):
    """Top-level application settings shared across services and interfaces."""

    home: HomeSettings
    server: ServerSettings = Field(default_factory=ServerSettings)
    image_resizing: ImageResizingSettings = Field(default_factory=ImageResizingSettings)
    log_level: str = Field(default="INFO", description="Verbosity level for application logs.")

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @classmethod
    def load(cls, config_path: Path | str) -> "AppSettings":
        """Load settings from a TOML file and validate the home folder.

        Raises:
            ConfigError: the file is missing, unreadable, not valid TOML, fails
                validation, or names a home path that is not a directory.
        """

        path = Path(os.path.normpath(config_path))
        if not path.exists():
            raise ConfigError(f"path does not exist: {path}")
        if path.is_dir():
            raise ConfigError(f"config path is a directory: {path}")

        try:
            with path.open("rb") as stream:
                payload = tomllib.load(stream)
        except OSError as exc:
            raise ConfigError(f"failed to read config file '{path}': {exc}") from exc
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"TOML decode failed for '{path}': {exc}") from exc

        try:
            settings = cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"invalid config in '{path}': {exc}") from exc
        logger.info("Loaded config file %s", path)

        return settings.with_validated_home()

    def with_validated_home(self) -> "AppSettings":
        """Return a copy whose home path is normalised, after checking it is an existing directory."""

        home_path = Path(os.path.normpath(self.home.path))
        if not home_path.exists():
            raise ConfigError(f"home path does not exist: {home_path}")
        if not home_path.is_dir():
            raise ConfigError(f"home path is not a directory: {home_path}")
        return self.model_copy(update={"home": self.home.model_copy(update={"path": home_path})})


def _split_listen_addr(listen_addr: str) -> Tuple[str, int]:
    host, sep, port = listen_addr.rpartition(":")
    if not sep or not port.isdigit() or not 0 <= int(port) <= 65535:
        raise ValueError(f"listen_addr must look like 'host:port', got {listen_addr!r}")
    if host.startswith("[") and host.endswith("]"):
        # Bracketed IPv6 literal, e.g. "[::1]:8080".
        host = host[1:-1]
        if not host:
            raise ValueError(f"listen_addr has an empty IPv6 host: {listen_addr!r}")
    return host or "0.0.0.0", int(port)


__all__ = ["AppSettings", "HomeSettings", "ImageResizingSettings", "ServerSettings"]
