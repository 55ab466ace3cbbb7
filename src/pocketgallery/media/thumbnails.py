"""Video thumbnail extraction via ffmpeg.

Each request gets its own ``ThumbnailSession``: one ffmpeg process that
picks a single representative frame from an early window of the video and
writes it as JPEG to stdout. Output is relayed chunk by chunk, so memory per
session is bounded by ``prebuffer_bytes`` plus one chunk.

Failure handling:

* Before any byte is flushed, the session is *primed*: stdout is read until
  ``prebuffer_bytes`` are held or the process closes it. A thumbnail that
  fits in the prebuffer is therefore fully produced, and its exit status
  known, before the HTTP status line goes out. Non-zero exit, empty output,
  a spawn error or the deadline passing all raise ``ExtractionError``.
* After the first flush a failure can only truncate the response. It is
  logged, and the process is reaped.

A fixed pool of slots (``max_concurrency``) caps simultaneous ffmpeg
processes; requests beyond it wait for a slot, within the same timeout.
Closing the session kills the process and frees the slot. The response
closes it when it ends for any reason, and a timer armed at spawn closes
it at the deadline whether or not anything is still reading.

Created: 2026-10-12
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator
from pathlib import Path

logger = logging.getLogger(__name__)

_STDERR_TAIL_LINES = 20
_STDERR_READ_SIZE = 4096
_KILL_WAIT = 5.0


class ExtractionError(Exception):
    """ffmpeg could not produce a thumbnail."""


class ThumbnailSession:
    """One ffmpeg process extracting one frame for one request.

    Created by ``ThumbnailExtractor.open()``. Iterate ``stream()`` exactly
    once; it closes the session when it finishes for any reason.
    """

    def __init__(
        self,
        path: Path,
        process: asyncio.subprocess.Process,
        extractor: ThumbnailExtractor,
        deadline: float,
    ):
        self.path = path
        self.process = process
        self._extractor = extractor
        self._deadline = deadline
        self._buffer = bytearray()
        self._eof = False
        self._timed_out = False
        self._closing: asyncio.Future | None = None
        self.bytes_sent = 0
        self.stderr_tail: deque[str] = deque(maxlen=_STDERR_TAIL_LINES)
        self._stderr_task = asyncio.create_task(self._drain_stderr())
        # Fires even when nothing is reading the session
        self._watchdog = asyncio.get_running_loop().call_at(deadline, self._expire)

    @property
    def closed(self) -> bool:
        return self._closing is not None

    def _expire(self) -> None:
        if self._closing is not None:
            return
        self._timed_out = True
        logger.warning(
            "Thumbnail for %s still running after %gs, killing ffmpeg",
            self.path,
            self._extractor.timeout,
        )
        self._begin_close()

    def _timeout_error(self, waiting_for: str = "") -> ExtractionError:
        return ExtractionError(f"timed out after {self._extractor.timeout:g}s{waiting_for}")

    def _remaining(self) -> float:
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    async def _drain_stderr(self) -> None:
        # ffmpeg blocks once the stderr pipe fills, so it is always read.
        stream = self.process.stderr
        if stream is None:
            return
        pending = b""
        while chunk := await stream.read(_STDERR_READ_SIZE):
            *lines, pending = (pending + chunk).split(b"\n")
            if len(pending) > _STDERR_READ_SIZE:
                lines.append(pending)
                pending = b""
            for line in lines:
                self._note_stderr(line)
        if pending:
            self._note_stderr(pending)

    def _note_stderr(self, line: bytes) -> None:
        text = line.decode("utf-8", errors="replace").rstrip()
        if text:
            self.stderr_tail.append(text[:500])
            logger.debug("[ffmpeg %s] %s", self.path.name, text)

    async def _read(self) -> bytes:
        """Next stdout chunk, ``b""`` at EOF. Kills the process on timeout."""
        try:
            return await asyncio.wait_for(
                self.process.stdout.read(self._extractor.chunk_size),
                timeout=self._remaining(),
            )
        except asyncio.TimeoutError:
            await self._kill()
            raise self._timeout_error() from None

    async def _wait(self) -> int:
        """Exit status of the process, killing it if it outlives the deadline."""
        try:
            return await asyncio.wait_for(self.process.wait(), timeout=self._remaining())
        except asyncio.TimeoutError:
            await self._kill()
            raise self._timeout_error(" waiting for exit") from None

    async def _kill(self) -> None:
        if self.process.returncode is not None:
            return
        try:
            self.process.kill()
        except ProcessLookupError:
            pass
        try:
            await asyncio.wait_for(self.process.wait(), timeout=_KILL_WAIT)
        except asyncio.TimeoutError:
            logger.warning("ffmpeg (pid %s) did not exit after SIGKILL", self.process.pid)

    async def prime(self) -> None:
        """Fill the prebuffer. Raises ``ExtractionError`` on early failure."""
        while len(self._buffer) < self._extractor.prebuffer_bytes:
            chunk = await self._read()
            if not chunk:
                self._eof = True
                break
            self._buffer.extend(chunk)

        if not self._eof:
            return

        returncode = await self._wait()
        if self._timed_out:
            raise self._timeout_error()
        if returncode != 0:
            raise ExtractionError(f"ffmpeg exited with status {returncode}")
        if not self._buffer:
            raise ExtractionError("ffmpeg produced no image data")

    async def stream(self) -> AsyncIterator[bytes]:
        """Yield the prebuffered bytes, then each chunk as ffmpeg writes it."""
        try:
            if self._buffer:
                data = bytes(self._buffer)
                self._buffer.clear()
                self.bytes_sent += len(data)
                yield data

            while not self._eof:
                chunk = await self._read()
                if not chunk:
                    self._eof = True
                    break
                self.bytes_sent += len(chunk)
                yield chunk

            returncode = await self._wait()
            if self._timed_out:
                raise self._timeout_error()
            if returncode != 0:
                self._log_failure(f"ffmpeg exited with status {returncode}")
        except ExtractionError as e:
            self._log_failure(str(e))
        finally:
            await self.close()

    def _log_failure(self, reason: str) -> None:
        logger.error(
            "Thumbnail for %s truncated after %d bytes: %s",
            self.path,
            self.bytes_sent,
            reason,
        )
        if self.stderr_tail:
            logger.error("ffmpeg stderr:\n%s", "\n".join(self.stderr_tail))

    async def close(self) -> None:
        """Kill the process if still running and give back the slot.

        Safe to call any number of times, from any task. Cleanup runs in its
        own task, so cancelling a caller does not leave the slot held.
        """
        await asyncio.shield(self._begin_close())

    def _begin_close(self) -> asyncio.Future:
        if self._closing is None:
            self._watchdog.cancel()
            self._closing = asyncio.ensure_future(self._teardown())
        return self._closing

    async def _teardown(self) -> None:
        try:
            await self._kill()
            try:
                await asyncio.wait_for(self._stderr_task, timeout=1.0)
            except asyncio.TimeoutError:
                logger.debug("stderr of %s still open after exit", self.path.name)
            except Exception:
                logger.debug("stderr drain for %s failed", self.path.name, exc_info=True)
        finally:
            self._extractor._release(self)


class ThumbnailExtractor:
    """Spawns ffmpeg thumbnail sessions under a concurrency cap."""

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        max_concurrency: int = 4,
        timeout: float = 30.0,
        chunk_size: int = 64 * 1024,
        prebuffer_bytes: int = 64 * 1024,
        window_start: float = 1.0,
        window_end: float = 10.0,
    ):
        self.ffmpeg_path = ffmpeg_path
        self.max_concurrency = max_concurrency
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.prebuffer_bytes = prebuffer_bytes
        self.window_start = window_start
        self.window_end = window_end
        self._slots = asyncio.Semaphore(max_concurrency)
        self._sessions: set[ThumbnailSession] = set()

    @classmethod
    def from_settings(cls, settings) -> ThumbnailExtractor:
        return cls(
            ffmpeg_path=settings.ffmpeg_path,
            max_concurrency=settings.thumbnail_max_concurrency,
            timeout=settings.thumbnail_timeout,
            chunk_size=settings.stream_chunk_size,
            prebuffer_bytes=settings.thumbnail_prebuffer_bytes,
            window_start=settings.thumbnail_window_start,
            window_end=settings.thumbnail_window_end,
        )

    @property
    def active(self) -> int:
        """Number of sessions currently holding a slot."""
        return len(self._sessions)

    def build_command(self, path: Path) -> list[str]:
        """ffmpeg argv writing one JPEG frame from the window to stdout."""
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-nostdin",
            "-loglevel", "error",
            "-ss", f"{self.window_start:g}",
            "-t", f"{self.window_end - self.window_start:g}",
            "-i", str(path),
            "-vf", "thumbnail",
            "-frames:v", "1",
            "-an",
            "-f", "image2pipe",
            "-c:v", "mjpeg",
            "pipe:1",
        ]  # fmt: skip

    async def open(self, path: str | Path) -> ThumbnailSession:
        """Start extracting a thumbnail for *path* and prime the session.

        Waits for a free slot first; the wait counts against ``timeout``.
        On return the session holds the slot until it is closed.

        Raises:
            ExtractionError: ffmpeg could not be started, failed, timed out
                or wrote nothing before the first flush.
        """
        path = Path(path)
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self.timeout)
        except asyncio.TimeoutError:
            raise ExtractionError(
                f"no thumbnail slot free within {self.timeout:g}s"
                f" ({self.max_concurrency} running)"
            ) from None
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(path),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self._slots.release()
            raise ExtractionError(f"could not start {self.ffmpeg_path}: {e}") from e
        except BaseException:
            self._slots.release()
            raise

        session = ThumbnailSession(path, process, self, deadline=deadline)
        self._sessions.add(session)
        logger.debug("Started ffmpeg (pid %s) for %s", process.pid, path)

        try:
            await session.prime()
        except ExtractionError:
            await session.close()
            if session.stderr_tail:
                logger.warning("ffmpeg stderr for %s:\n%s", path, "\n".join(session.stderr_tail))
            raise
        except BaseException:
            await session.close()
            raise
        return session

    def _release(self, session: ThumbnailSession) -> None:
        if session in self._sessions:
            self._sessions.discard(session)
            self._slots.release()

    async def shutdown(self) -> None:
        """Close every live session, killing its ffmpeg process."""
        sessions = list(self._sessions)
        if sessions:
            logger.info("Stopping %d running thumbnail extraction(s)", len(sessions))
        for session in sessions:
            await session.close()
