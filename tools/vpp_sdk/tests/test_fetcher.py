from __future__ import annotations

import contextlib
import io
import sys
import tempfile
import threading
import unittest
from pathlib import Path
from unittest import mock

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from vpp_sdk_core.core import ArchiveFetcher, DownloadFailed, NetworkFailure, RunCancelled  # noqa: E402
from vpp_sdk_core import _core_fetch  # noqa: E402

PACKAGE_URL = "https://packagecloud.io/fdio/release/packages/debian/bookworm/vpp_25.10_amd64.deb/download.deb"
MIRROR_URL = "https://mirror.example.test/vpp_25.10_amd64.deb"


class ArchiveFetcherTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_downloads_and_follows_redirects(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == PACKAGE_URL:
                return httpx.Response(302, headers={"Location": MIRROR_URL})
            self.assertEqual(str(request.url), MIRROR_URL)
            return httpx.Response(200, content=b"!<arch>\npayload")

        fetcher = ArchiveFetcher(transport=httpx.MockTransport(handler))
        target = self.root / "amd64" / "vpp_25.10_amd64.deb"
        result = fetcher.fetch(PACKAGE_URL, target)

        self.assertEqual(result, target)
        self.assertEqual(target.read_bytes(), b"!<arch>\npayload")

    def test_http_error_raises_download_failed(self) -> None:
        fetcher = ArchiveFetcher(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
        target = self.root / "missing.deb"

        with self.assertRaises(DownloadFailed) as ctx:
            fetcher.fetch(PACKAGE_URL, target)

        self.assertIsInstance(ctx.exception, NetworkFailure)
        self.assertIn("HTTP 404", str(ctx.exception))
        self.assertEqual(ctx.exception.exit_code, 1)
        self.assertFalse(target.exists())

    def test_transport_error_raises_download_failed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        fetcher = ArchiveFetcher(transport=httpx.MockTransport(handler))
        with self.assertRaises(DownloadFailed) as ctx:
            fetcher.fetch(PACKAGE_URL, self.root / "pkg.deb")
        self.assertIn("ConnectError", str(ctx.exception))

    def test_no_retry_by_default(self) -> None:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            return httpx.Response(503)

        fetcher = ArchiveFetcher(transport=httpx.MockTransport(handler))
        with self.assertRaises(DownloadFailed):
            fetcher.fetch(PACKAGE_URL, self.root / "pkg.deb")
        self.assertEqual(len(calls), 1)

    def test_bounded_retry_with_backoff(self) -> None:
        responses = [httpx.Response(503), httpx.Response(502), httpx.Response(200, content=b"deb")]

        def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        fetcher = ArchiveFetcher(retries=2, backoff_seconds=0.5, transport=httpx.MockTransport(handler))
        target = self.root / "pkg.deb"
        with mock.patch.object(_core_fetch.time, "sleep") as sleep, contextlib.redirect_stdout(io.StringIO()):
            fetcher.fetch(PACKAGE_URL, target)

        self.assertEqual(target.read_bytes(), b"deb")
        self.assertEqual([call.args[0] for call in sleep.call_args_list], [0.5, 1.0])

    def test_retries_are_exhausted(self) -> None:
        fetcher = ArchiveFetcher(retries=1, backoff_seconds=0, transport=httpx.MockTransport(lambda r: httpx.Response(500)))
        with contextlib.redirect_stdout(io.StringIO()) as output:
            with self.assertRaises(DownloadFailed):
                fetcher.fetch(PACKAGE_URL, self.root / "pkg.deb")
        self.assertIn("retrying", output.getvalue())

    def test_slow_download_hits_deadline(self) -> None:
        readings = iter([0.0, 31.0])
        fetcher = ArchiveFetcher(
            deadline_seconds=30,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"!<arch>\n")),
            clock=lambda: next(readings),
        )
        target = self.root / "pkg.deb"
        with self.assertRaises(DownloadFailed) as ctx:
            fetcher.fetch(PACKAGE_URL, target)
        self.assertIn("ReadTimeout: download exceeded 30s", str(ctx.exception))
        self.assertFalse(target.exists())

    def test_stop_event_interrupts_download(self) -> None:
        stop = threading.Event()
        stop.set()
        fetcher = ArchiveFetcher(transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"deb")))
        with self.assertRaises(RunCancelled):
            fetcher.fetch(PACKAGE_URL, self.root / "pkg.deb", stop=stop)


if __name__ == "__main__":
    unittest.main()
