"""
Environment variable hydration with save/restore semantics.

Used by the interceptor to neutralize ANSI color for the duration of a
capture, but independent of any specific variable names.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping, MutableMapping

# Disable-colors flag on, force-color flag removed, generic color flag off.
COLOR_ENV_OVERRIDES: dict[str, str | None] = {
    "NO_COLOR": "1",
    "FORCE_COLOR": None,
    "CLICOLOR": "0",
}


def hydrate_environment(
    overrides: Mapping[str, str | None],
    environ: MutableMapping[str, str] | None = None,
) -> Callable[[], None]:
    """
    Apply environment overrides and return a function that rolls them back.

    A value of ``None`` removes the variable. On rollback, every variable is
    returned to its prior value, or removed if it did not exist before
    (never left set to an empty string).

    Args:
        overrides: Variable name to new value (or None to unset).
        environ: Mapping to modify. Defaults to ``os.environ``.

    Returns:
        A callable restoring the previous state of every overridden variable.

    Example:
        restore = hydrate_environment({"NO_COLOR": "1", "FORCE_COLOR": None})
        try:
            ...
        finally:
            restore()
    """
    env = os.environ if environ is None else environ
    previous: dict[str, str | None] = {}

    for key, value in overrides.items():
        previous[key] = env.get(key)
        if value is None:
            env.pop(key, None)
        else:
            env[key] = value

    def restore() -> None:
        for key, old_value in previous.items():
            if old_value is None:
                env.pop(key, None)
            else:
                env[key] = old_value

    return restore
