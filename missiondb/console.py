"""Line-oriented terminal I/O for the interactive console."""
from __future__ import annotations

import sys
from typing import Optional, TextIO


class Console:
    """Reads one value per line and writes prompts, results and diagnostics."""

    def __init__(
        self,
        stdin: TextIO,
        stdout: TextIO,
        stderr: Optional[TextIO] = None,
        *,
        owns_input: bool = False,
    ) -> None:
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr if stderr is not None else stdout
        self._owns_input = owns_input

    @classmethod
    def from_stdio(cls) -> "Console":
        """Wrap the process streams; stdin is closed when the console closes."""

        reconfigure = getattr(sys.stdin, "reconfigure", None)
        if reconfigure is not None:
            reconfigure(errors="replace")
        return cls(sys.stdin, sys.stdout, sys.stderr, owns_input=True)

    def prompt(self, label: str) -> str:
        """Show ``label`` and return the next input line without its newline.

        Raises :class:`EOFError` once the input stream is exhausted.
        """

        self._stdout.write(label)
        self._stdout.flush()
        line = self._stdin.readline()
        if line == "":
            raise EOFError("Input stream closed")
        # Undecodable bytes become U+FFFD instead of lone surrogates.
        line = line.encode("utf-8", "surrogatepass").decode("utf-8", "replace")
        return line.rstrip("\r\n")

    def say(self, message: str = "") -> None:
        print(message, file=self._stdout)

    def error(self, message: str) -> None:
        print(message, file=self._stderr)

    def close(self) -> None:
        try:
            self._stdout.flush()
            self._stderr.flush()
        finally:
            if self._owns_input:
                self._stdin.close()

    def __enter__(self) -> "Console":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["Console"]
