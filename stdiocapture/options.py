"""
CaptureOptions: configuration for a single capture.

Options resolve in layers:

    dataclass defaults → STDIOCAPTURE_* environment variables → explicit options

Example:
    >>> CaptureOptions()
    CaptureOptions(echo=True, no_color=True)
    >>> normalize_options({"echo": False})
    CaptureOptions(echo=False, no_color=True)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

ECHO_ENV_VAR = "STDIOCAPTURE_ECHO"
NO_COLOR_ENV_VAR = "STDIOCAPTURE_NO_COLOR"

_TRUTHY = frozenset({"1", "true", "yes", "on"})
_FALSY = frozenset({"0", "false", "no", "off"})


def _parse_flag(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {raw!r}")


@dataclass(frozen=True)
class CaptureOptions:
    """
    Configuration for capturing stdout/stderr.

    Attributes:
        echo: Forward every intercepted write to the real channel after
            recording it.
        no_color: Override the color-control environment variables
            (NO_COLOR, FORCE_COLOR, CLICOLOR) while the capture is active.

    Example:
        # Record only, nothing reaches the terminal
        CaptureOptions.silent()

        # Record and echo, leave color settings alone
        CaptureOptions.passthrough()
    """

    echo: bool = True
    no_color: bool = True

    def __post_init__(self) -> None:
        for f in fields(self):
            if not isinstance(getattr(self, f.name), bool):
                raise TypeError(
                    f"CaptureOptions.{f.name} must be a bool, "
                    f"got {type(getattr(self, f.name)).__name__}"
                )

    # Convenience constructors
    @classmethod
    def silent(cls) -> CaptureOptions:
        """Record output without echoing it to the real channels."""
        return cls(echo=False)

    @classmethod
    def passthrough(cls) -> CaptureOptions:
        """Record and echo output, without touching color settings."""
        return cls(echo=True, no_color=False)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> CaptureOptions:
        """
        Build options from STDIOCAPTURE_ECHO / STDIOCAPTURE_NO_COLOR.

        Unset variables fall back to the dataclass defaults.

        Raises:
            ValueError: If a variable is set to something that is not a
                recognizable boolean.
        """
        env = os.environ if environ is None else environ
        values: dict[str, bool] = {}

        raw_echo = env.get(ECHO_ENV_VAR)
        if raw_echo is not None:
            values["echo"] = _parse_flag(ECHO_ENV_VAR, raw_echo)

        raw_no_color = env.get(NO_COLOR_ENV_VAR)
        if raw_no_color is not None:
            values["no_color"] = _parse_flag(NO_COLOR_ENV_VAR, raw_no_color)

        return cls(**values)


def normalize_options(
    options: CaptureOptions | Mapping[str, Any] | None,
    environ: Mapping[str, str] | None = None,
) -> CaptureOptions:
    """
    Normalize user-provided capture options.

    Args:
        options: None for environment defaults, a CaptureOptions instance
            (returned unchanged), or a mapping of field names applied over
            the environment defaults.
        environ: Environment to read defaults from. Defaults to os.environ.

    Returns:
        A CaptureOptions instance.

    Raises:
        TypeError: If options is of an unsupported type or the mapping
            contains unknown keys.
    """
    if isinstance(options, CaptureOptions):
        return options

    base = CaptureOptions.from_env(environ)
    if options is None:
        return base

    if isinstance(options, Mapping):
        known = {f.name for f in fields(CaptureOptions)}
        unknown = set(options) - known
        if unknown:
            raise TypeError(f"Unknown capture options: {', '.join(sorted(unknown))}")
        return replace(base, **options)

    raise TypeError(
        f"options must be CaptureOptions, a mapping or None, got {type(options).__name__}"
    )
