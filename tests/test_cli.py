"""Tests for the command line entry point."""

import io
import os
import sys

import pytest

from diffpaint import cli
from diffpaint.wrap import strip_ansi


class FakeStream(io.TextIOWrapper):
    """A text stream over bytes that can pretend to be a terminal.
    """

    def __init__(self, data=b"", tty=False):
        super(FakeStream, self).__init__(io.BytesIO(data), encoding="utf-8")
        self.tty = tty

    def isatty(self):
        return self.tty

    def value(self):
        self.flush()
        return self.buffer.getvalue()


@pytest.fixture
def streams(monkeypatch):
    """Replaces the standard streams and keeps the entry point from touching process-wide state.
    """

    def install(stdin=b"", stdin_tty=False):
        (stdin, stdout, stderr) = (FakeStream(stdin, stdin_tty), FakeStream(), io.StringIO())

        monkeypatch.setattr(sys, "stdin", stdin)
        monkeypatch.setattr(sys, "stdout", stdout)
        monkeypatch.setattr(sys, "stderr", stderr)

        return (stdout, stderr)

    monkeypatch.setattr(cli.signal, "signal", lambda signum, handler: None)
    monkeypatch.setattr(cli, "start_determining_calling_process", lambda: None)
    monkeypatch.setattr(cli.logging, "basicConfig", lambda **kwargs: None)

    for name in list(os.environ):

        if name.startswith("DIFFPAINT_"):
            monkeypatch.delenv(name)

    return install


DIFF = b"""--- a/hello.txt
+++ b/hello.txt
@@ -1 +1 @@
-hello world
+hello there
"""


class TestMain:

    def test_paints_stdin(self, streams):
        (stdout, _) = streams(DIFF)

        assert cli.main(["--color", "always", "-w", "0", "--no-syntax"]) == cli.EXIT_SUCCESS
        assert strip_ansi(stdout.value().decode("utf-8")) == DIFF.decode("utf-8")

    def test_auto_color_off_when_not_a_terminal(self, streams):
        (stdout, _) = streams(DIFF)

        assert cli.main(["-w", "0"]) == cli.EXIT_SUCCESS
        assert stdout.value() == DIFF

    def test_two_files(self, streams, tmp_path):
        (minus_file, plus_file) = (tmp_path / "a.txt", tmp_path / "b.txt")
        minus_file.write_bytes(b"one\ntwo\n")
        plus_file.write_bytes(b"one\nthree\n")

        (stdout, _) = streams()

        assert cli.main(["--color", "always", "-w", "0", str(minus_file), str(plus_file)]) == cli.EXIT_DIFFERENT

        output = strip_ansi(stdout.value().decode("utf-8")).splitlines()

        assert "-two" in output
        assert "+three" in output

    def test_identical_files(self, streams, tmp_path):
        (minus_file, plus_file) = (tmp_path / "a.txt", tmp_path / "b.txt")
        minus_file.write_bytes(b"same\n")
        plus_file.write_bytes(b"same\n")

        (stdout, _) = streams()

        assert cli.main([str(minus_file), str(plus_file)]) == cli.EXIT_SUCCESS
        assert stdout.value() == b""

    def test_missing_file(self, streams, tmp_path):
        (_, stderr) = streams()

        assert cli.main([str(tmp_path / "a"), str(tmp_path / "b")]) == cli.EXIT_ERROR
        assert "diffpaint:" in stderr.getvalue()

    def test_single_file_is_an_error(self, streams, tmp_path):
        (_, stderr) = streams()

        assert cli.main([str(tmp_path / "a")]) == cli.EXIT_ERROR
        assert "both" in stderr.getvalue()

    def test_terminal_stdin_is_an_error(self, streams):
        (_, stderr) = streams(stdin_tty=True)

        assert cli.main([]) == cli.EXIT_ERROR
        assert "git diff | diffpaint" in stderr.getvalue()

    def test_invalid_option_value(self, streams):
        (_, stderr) = streams(DIFF)

        assert cli.main(["--max-line-distance", "2"]) == cli.EXIT_ERROR
        assert "maximum line distance" in stderr.getvalue()

    def test_show_config(self, streams):
        (stdout, _) = streams()

        assert cli.main(["--show-config", "--theme", "light", "--plus-style", "bold"]) == cli.EXIT_SUCCESS

        output = stdout.value().decode("utf-8")

        assert "{0:<20} = {1}".format("theme", "light") in output
        assert "{0:<20} = \"{1}\"".format("plus-style", "bold bg:#d0ffd0") in output

    def test_closed_output_exits_quietly(self, streams, monkeypatch):
        streams(DIFF)
        closed = []

        def run(self, lines, out):
            raise cli.OutputClosed()

        monkeypatch.setattr(cli.DiffPainter, "run", run)
        monkeypatch.setattr(cli, "close_stdout", lambda: closed.append(True))

        assert cli.main(["--color", "always"]) == cli.EXIT_SUCCESS
        assert closed == [True]
