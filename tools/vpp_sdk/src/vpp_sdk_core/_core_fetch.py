from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Callable

import httpx

from ._core_base import DownloadFailed, TOOL_VERSION
from ._core_scheduler import raise_if_stopped

DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_DEADLINE_SECONDS = 1800.0
CHUNK_SIZE = 1 << 16


class ArchiveFetcher:
    """Downloads package archives over HTTP(S).

    ``timeout`` bounds each connect, read and write operation. ``deadline_seconds``
    bounds a whole attempt, so a server trickling bytes cannot hold a download
    open forever; ``None`` disables it.

    ``retries`` is the number of extra attempts after the first failure; the
    default of zero keeps the fail-fast behavior. Attempts are spaced by
    ``backoff_seconds * 2**attempt``.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        retries: int = 0,
        backoff_seconds: float = 1.0,
        transport: httpx.BaseTransport | None = None,
        deadline_seconds: float | None = DEFAULT_DEADLINE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout = timeout
        self.retries = max(0, retries)
        self.backoff_seconds = backoff_seconds
        self.transport = transport
        self.deadline_seconds = deadline_seconds
        self.clock = clock

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={"User-Agent": f"vpp-sdk-tools/{TOOL_VERSION}"},
            transport=self.transport,
        )

    def _download_once(
        self,
        client: httpx.Client,
        url: str,
        destination: Path,
        stop: threading.Event | None = None,
    ) -> int:
        written = 0
        deadline = None if self.deadline_seconds is None else self.clock() + self.deadline_seconds
        with client.stream("GET", url) as response:
            response.raise_for_status()
            with destination.open("wb") as handle:
                for chunk in response.iter_bytes(CHUNK_SIZE):
                    raise_if_stopped(stop, destination.name, "finishing the download")
                    if deadline is not None and self.clock() > deadline:
                        raise httpx.ReadTimeout(
                            f"download exceeded {self.deadline_seconds:g}s after {written} bytes",
                            request=response.request,
                        )
                    handle.write(chunk)
                    written += len(chunk)
        return written

    def fetch(self, url: str, destination: Path, stop: threading.Event | None = None) -> Path:
        destination.parent.mkdir(parents=True, exist_ok=True)
        last_error: httpx.HTTPError | None = None
        with self._client() as client:
            for attempt in range(self.retries + 1):
                if attempt:
                    time.sleep(self.backoff_seconds * (2 ** (attempt - 1)))
                try:
                    self._download_once(client, url, destination, stop)
                    return destination
                except httpx.HTTPStatusError as exc:
                    last_error = exc
                    detail = f"HTTP {exc.response.status_code}"
                except httpx.HTTPError as exc:
                    last_error = exc
                    detail = f"{type(exc).__name__}: {exc}"
                if destination.exists():
                    destination.unlink()
                if attempt < self.retries:
                    print(f"warning: download attempt {attempt + 1} failed for {url} ({detail}); retrying")
        raise DownloadFailed(f"Download failed for {url} ({detail})") from last_error
