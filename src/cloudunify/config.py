"""Runtime configuration for cloudunify."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from cloudunify.errors import InvalidArgumentError

ENV_PREFIX = "CLOUDUNIFY_"

DEFAULT_WELL_KNOWN_PATHS: tuple[str, ...] = ("/", "/Documents", "/Pictures", "/Downloads")


@dataclass(frozen=True)
class CloudUnifyConfig:
    """
    Settings for the aggregator, the folder cache and the preloader.

    Attributes:
        cache_ttl_sec: Age after which a cached listing is treated as absent.
        preload_enabled: Warm subfolders in the background after folder loads.
        preload_max_subfolders: Subfolders loaded per preload job.
        preload_delay_sec: Pause between two subfolder loads of one job.
        preload_workers: Size of the background preload pool.
        fanout_max_workers: Upper bound of concurrent provider calls per fan-out.
        well_known_paths: Paths preloaded once by CachedFileSystem.start().
        application_name: Sent as the User-Agent of Google Drive and OneDrive requests.
    """

    cache_ttl_sec: float = 300.0
    preload_enabled: bool = True
    preload_max_subfolders: int = 5
    preload_delay_sec: float = 0.5
    preload_workers: int = 1
    fanout_max_workers: int = 8
    well_known_paths: tuple[str, ...] = field(default=DEFAULT_WELL_KNOWN_PATHS)
    application_name: str = "CloudUnify"

    def __post_init__(self) -> None:
        if self.cache_ttl_sec < 0:
            raise InvalidArgumentError("cache_ttl_sec must be >= 0")
        if self.preload_max_subfolders < 0:
            raise InvalidArgumentError("preload_max_subfolders must be >= 0")
        if self.preload_delay_sec < 0:
            raise InvalidArgumentError("preload_delay_sec must be >= 0")
        if self.preload_workers < 1:
            raise InvalidArgumentError("preload_workers must be >= 1")
        if self.fanout_max_workers < 1:
            raise InvalidArgumentError("fanout_max_workers must be >= 1")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CloudUnifyConfig":
        """
        Build a config from CLOUDUNIFY_* environment variables.

        Recognized: CACHE_TTL_SEC, PRELOAD_ENABLED, PRELOAD_MAX_SUBFOLDERS,
        PRELOAD_DELAY_SEC, PRELOAD_WORKERS, FANOUT_MAX_WORKERS,
        WELL_KNOWN_PATHS (comma separated), APPLICATION_NAME.
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        def raw(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        for name, attr, conv in (
            ("CACHE_TTL_SEC", "cache_ttl_sec", float),
            ("PRELOAD_DELAY_SEC", "preload_delay_sec", float),
            ("PRELOAD_MAX_SUBFOLDERS", "preload_max_subfolders", int),
            ("PRELOAD_WORKERS", "preload_workers", int),
            ("FANOUT_MAX_WORKERS", "fanout_max_workers", int),
        ):
            value = raw(name)
            if value is None:
                continue
            try:
                kwargs[attr] = conv(value)
            except ValueError as exc:
                raise InvalidArgumentError(
                    f"Invalid value for {ENV_PREFIX}{name}",
                    details={"value": value},
                    cause=exc,
                ) from exc

        enabled = raw("PRELOAD_ENABLED")
        if enabled is not None:
            kwargs["preload_enabled"] = _parse_bool(ENV_PREFIX + "PRELOAD_ENABLED", enabled)

        paths = raw("WELL_KNOWN_PATHS")
        if paths is not None:
            kwargs["well_known_paths"] = tuple(p.strip() for p in paths.split(",") if p.strip())

        app_name = raw("APPLICATION_NAME")
        if app_name is not None:
            kwargs["application_name"] = app_name

        return cls(**kwargs)  # type: ignore[arg-type]


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise InvalidArgumentError(f"Invalid boolean for {name}", details={"value": value})
