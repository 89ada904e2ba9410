"""
stdiocapture: capture what a function prints.

Runs a unit of work with sys.stdout and sys.stderr intercepted, and returns
the text written to each channel plus their chronological interleaving,
while (by default) still echoing it to the terminal. The streams and the
color environment are always restored before the result or the error
reaches the caller.

Example:
    import stdiocapture

    result = stdiocapture.capture_sync(lambda: print("hello"))
    assert result.stdout == "hello\\n"

    async def work():
        print("out")
        print("err", file=sys.stderr)

    result = await stdiocapture.capture_async(work, {"echo": False})
    assert result.combined == "out\\nerr\\n"
"""

__version__ = "0.1.0"

# Orchestration
from stdiocapture.capture import capture_async, capture_sync, to_awaitable

# Environment
from stdiocapture.environment import COLOR_ENV_OVERRIDES, hydrate_environment

# Interception
from stdiocapture.interceptor import ChannelShim, Interception, install

# Options / Result
from stdiocapture.options import CaptureOptions, normalize_options
from stdiocapture.result import CaptureResult

__all__ = [
    # Version
    "__version__",
    # Capture
    "capture_sync",
    "capture_async",
    "to_awaitable",
    # Types
    "CaptureOptions",
    "CaptureResult",
    "normalize_options",
    # Interception
    "install",
    "Interception",
    "ChannelShim",
    # Environment
    "COLOR_ENV_OVERRIDES",
    "hydrate_environment",
]
