import io
import os
import tempfile
import unittest
from unittest.mock import patch

from lanshare import cli


class CliBehaviorTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self._tmp.name, "video.mp4")
        with open(self.path, "wb") as f:
            f.write(b"v" * 4096)

    def tearDown(self):
        self._tmp.cleanup()

    def test_missing_file_flag_prints_usage_hint(self):
        """Validate scenario: no path means a hint and a clean exit without serving."""
        with patch("sys.stdout", new_callable=io.StringIO) as out, patch("lanshare.cli.run") as mrun:
            code = cli.main([])
        self.assertEqual(code, 0)
        self.assertIn("lanshare -file", out.getvalue())
        mrun.assert_not_called()

    def test_nonexistent_file_exits_non_zero(self):
        missing = os.path.join(self._tmp.name, "nope.bin")
        with patch("sys.stderr", new_callable=io.StringIO) as err, patch("lanshare.cli.run") as mrun:
            code = cli.main(["-file", missing])
        self.assertEqual(code, 1)
        self.assertIn("file not found", err.getvalue())
        mrun.assert_not_called()

    def test_busy_port_exits_non_zero(self):
        with patch("sys.stderr", new_callable=io.StringIO) as err, patch(
            "lanshare.cli.port_available", return_value=False
        ), patch("lanshare.cli.run") as mrun:
            code = cli.main(["-file", self.path, "-port", "9191"])
        self.assertEqual(code, 1)
        self.assertIn("port 9191", err.getvalue())
        mrun.assert_not_called()

    def test_invalid_port_is_rejected_by_parser(self):
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as cm:
                cli.main(["-file", self.path, "-port", "70000"])
        self.assertEqual(cm.exception.code, 2)

    def test_success_prints_banner_and_serves_on_default_port(self):
        """Validate scenario: link and QR are printed, then the app is served."""
        with patch.object(cli.config, "PORT", 8989), patch(
            "sys.stdout", new_callable=io.StringIO
        ) as out, patch("lanshare.cli.port_available", return_value=True), patch(
            "lanshare.cli.get_local_ip", return_value="192.168.1.5"
        ), patch("lanshare.cli.run") as mrun:
            code = cli.main(["--file", self.path])
        self.assertEqual(code, 0)
        text = out.getvalue()
        self.assertIn("Link: http://192.168.1.5:8989/video.mp4", text)
        self.assertIn("File: video.mp4 (4.0 KB)", text)
        self.assertGreater(len(text.splitlines()), 15)
        mrun.assert_called_once()
        self.assertEqual(mrun.call_args[0][1], 8989)

    def test_share_url_quotes_name_and_brackets_ipv6(self):
        served = cli.load_served_file(self.path)
        self.assertEqual(cli.share_url(served, "fe80::1", 8989), "http://[fe80::1]:8989/video.mp4")
        renamed = os.path.join(self._tmp.name, "my clip.mp4")
        os.rename(self.path, renamed)
        served = cli.load_served_file(renamed)
        self.assertEqual(cli.share_url(served, "10.0.0.2", 80), "http://10.0.0.2:80/my%20clip.mp4")


if __name__ == "__main__":
    unittest.main()
