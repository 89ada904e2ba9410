"""
Channel interception for sys.stdout / sys.stderr.

install() replaces the ``write`` entry point of both standard streams with a
recording function and returns an Interception handle. The replacement is
set on the stream object itself, so writers that hold a reference to the
stream (a logging.StreamHandler created earlier, for instance) are recorded
too. Streams that refuse attribute assignment are swapped out for a
ChannelShim instead. Calling Interception.restore() is the only way the
streams and the color environment return to their pre-capture state.

Interception is process-wide: while installed, every writer to the two
channels is recorded, not only the code under capture. Strictly nested
captures unwind correctly (the inner one echoes into the outer one), but
overlapping captures that restore out of order corrupt each other's saved
entry points. No lock serializes them.
"""

from __future__ import annotations

import io
import logging
import sys
import threading
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Literal, TextIO

from stdiocapture.environment import COLOR_ENV_OVERRIDES, hydrate_environment
from stdiocapture.options import CaptureOptions, normalize_options
from stdiocapture.result import CaptureResult

logger = logging.getLogger(__name__)

ChannelName = Literal["stdout", "stderr"]
CHANNELS: tuple[ChannelName, ...] = ("stdout", "stderr")


class ChannelShim:
    """
    Stand-in for a standard stream that records writes, then optionally
    forwards them to the original stream.

    Only used for streams whose ``write`` cannot be replaced in place.
    Everything other than writing, flushing and closing is delegated to the
    original stream (encoding, isatty, fileno, buffer, ...).
    """

    def __init__(
        self,
        original: TextIO,
        channel: ChannelName,
        record: Callable[[ChannelName, str], None],
        echo: bool = True,
        forward: Callable[[str], Any] | None = None,
    ):
        self._original = original
        self._channel = channel
        self._record = record
        self._echo = echo
        self._forward = forward if forward is not None else original.write

    @property
    def original(self) -> TextIO:
        """The stream this shim replaced."""
        return self._original

    def write(self, s: str) -> int:
        self._record(self._channel, s)
        if self._echo:
            self._forward(s)
        return len(s)

    def writelines(self, lines: Iterable[str]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        if self._echo:
            self._original.flush()

    def close(self) -> None:
        # The real stream outlives the capture
        self.flush()

    def __getattr__(self, name: str) -> Any:
        # Instances built without __init__ (copy, pickle) have no _original
        if "_original" not in self.__dict__:
            raise AttributeError(name)
        return getattr(self._original, name)

    def __repr__(self) -> str:
        return f"<ChannelShim {self._channel} echo={self._echo} wrapping {self._original!r}>"


class Interception:
    """
    Handle owning everything needed to undo one installation.

    Holds the stream objects, their saved write entry points, the color
    environment rollback and the capture buffers. Usable as a context
    manager; leaving the block restores.

    Example:
        with install(CaptureOptions.silent()) as interception:
            print("hello")

        interception.result().stdout  # "hello\\n"
    """

    def __init__(self, options: CaptureOptions):
        self.options = options
        self._buffers: dict[ChannelName, io.StringIO] = {
            "stdout": io.StringIO(),
            "stderr": io.StringIO(),
        }
        self._combined = io.StringIO()
        self._lock = threading.Lock()

        self._streams: dict[ChannelName, TextIO] = {}
        # Instance-level write found at install time (None: the class method)
        self._saved_writes: dict[ChannelName, Callable[[str], Any] | None] = {}
        self._original_writes: dict[ChannelName, Callable[[str], Any]] = {}
        self._patched_writes: dict[ChannelName, Callable[[str], int]] = {}
        self._shims: dict[ChannelName, ChannelShim] = {}
        self._restore_env: Callable[[], None] | None = None
        self._active = False

    @property
    def active(self) -> bool:
        """True between install and restore."""
        return self._active

    def _record(self, channel: ChannelName, s: str) -> None:
        with self._lock:
            self._buffers[channel].write(s)
            self._combined.write(s)

    def _make_write(
        self, channel: ChannelName, original_write: Callable[[str], Any]
    ) -> Callable[[str], int]:
        echo = self.options.echo

        def write(s: str) -> int:
            self._record(channel, s)
            if echo:
                original_write(s)
            return len(s)

        return write

    def _install_channel(self, channel: ChannelName) -> None:
        stream = getattr(sys, channel)
        for other, other_stream in self._streams.items():
            if other_stream is stream and other in self._patched_writes:
                # Both channels share one object; its write already records as the other
                original_write = self._original_writes[other]
                self._swap_in_shim(channel, stream, forward=original_write)
                self._streams[channel] = stream
                self._original_writes[channel] = original_write
                return

        self._streams[channel] = stream
        original_write = stream.write
        self._original_writes[channel] = original_write
        patched = self._make_write(channel, original_write)

        try:
            saved = vars(stream).get("write")
            stream.write = patched
        except (AttributeError, TypeError):
            logger.debug("sys.%s does not accept a write override, swapping the stream", channel)
            self._swap_in_shim(channel, stream)
        else:
            self._saved_writes[channel] = saved
            self._patched_writes[channel] = patched

    def _swap_in_shim(
        self,
        channel: ChannelName,
        stream: TextIO,
        forward: Callable[[str], Any] | None = None,
    ) -> None:
        shim = ChannelShim(
            stream, channel, self._record, echo=self.options.echo, forward=forward
        )
        setattr(sys, channel, shim)
        self._shims[channel] = shim

    def _restore_channel(self, channel: ChannelName) -> list[str]:
        stream = self._streams[channel]
        replaced = []

        if channel in self._patched_writes:
            if vars(stream).get("write") is not self._patched_writes[channel]:
                replaced.append(f"sys.{channel}.write")
            saved = self._saved_writes[channel]
            if saved is not None:
                stream.write = saved
            elif "write" in vars(stream):
                del stream.write
            expected: Any = stream
        else:
            expected = self._shims[channel]

        if getattr(sys, channel) is not expected:
            replaced.append(f"sys.{channel}")
        setattr(sys, channel, stream)
        return replaced

    def _install(self) -> None:
        logger.debug(
            "Installing stdio interception (echo=%s, no_color=%s)",
            self.options.echo,
            self.options.no_color,
        )

        for channel in CHANNELS:
            self._install_channel(channel)

        if self.options.no_color:
            self._restore_env = hydrate_environment(COLOR_ENV_OVERRIDES)

        self._active = True

    def restore(self) -> None:
        """
        Reinstate the original write entry points and streams, then roll
        back the environment.

        Intended to be called exactly once; further calls do nothing.
        """
        if not self._active:
            return
        self._active = False

        replaced: list[str] = []
        for channel in CHANNELS:
            replaced.extend(self._restore_channel(channel))

        if self._restore_env is not None:
            self._restore_env()
            self._restore_env = None

        for target in replaced:
            logger.warning(
                "%s was replaced while a capture was active; "
                "restoring the one saved at install time",
                target,
            )
        logger.debug("Restored stdio interception")

    def result(self) -> CaptureResult:
        """Snapshot of the text recorded so far."""
        with self._lock:
            return CaptureResult(
                stdout=self._buffers["stdout"].getvalue(),
                stderr=self._buffers["stderr"].getvalue(),
                combined=self._combined.getvalue(),
            )

    def __enter__(self) -> Interception:
        return self

    def __exit__(self, *args: Any) -> None:
        self.restore()


def install(options: CaptureOptions | Mapping[str, Any] | None = None) -> Interception:
    """
    Start intercepting sys.stdout and sys.stderr.

    Args:
        options: Capture configuration (see normalize_options).

    Returns:
        The Interception handle. The caller must call restore() (or use it
        as a context manager) to put the streams back.
    """
    interception = Interception(normalize_options(options))
    interception._install()
    return interception
