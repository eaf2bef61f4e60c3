import os
import threading
from termcolor import colored


# Same limit as a default line scanner buffer
MAX_LINE_SIZE = 64 * 1024


class LineScanError(Exception):
    key: str

    def __init__(self, key: str, msg: str) -> None:
        super().__init__(f"scanning {key!r} line by line: {msg}")
        self.key = key


def split_lines(data: bytes) -> tuple[str, ...]:
    """
    Splits data into lines. A trailing newline does not produce an
    extra empty line, and a carriage return right before a newline
    is dropped. Like a default line scanner, a line must be shorter than
    MAX_LINE_SIZE. Bytes that are not valid UTF-8 are kept as surrogate
    escapes rather than rejected.
    """
    if not data:
        return ()
    raw_lines = data.split(b"\n")
    if data.endswith(b"\n"):
        raw_lines.pop()
    lines = []
    for lineno, raw in enumerate(raw_lines, 1):
        if len(raw) >= MAX_LINE_SIZE:
            raise ValueError(
                "line {} does not fit in {} bytes".format(lineno, MAX_LINE_SIZE))
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        lines.append(raw.decode("utf-8", errors="surrogateescape"))
    return tuple(lines)


class LoadedFile:
    """
    Immutable contents of a file (or in-memory buffer) plus lazily
    computed line information.
    """

    from_file: bool
    stat: os.stat_result | None

    def __init__(
        self,
        key: str,
        data: bytes,
        from_file: bool = False,
        stat: os.stat_result | None = None,
    ) -> None:
        self._key = key
        self._data = bytes(data)
        self.from_file = from_file
        self.stat = stat
        self._lines: tuple[str, ...] | None = None
        self._lines_lock = threading.Lock()

    @property
    def key(self) -> str:
        return self._key

    @property
    def data(self) -> bytes:
        return self._data

    def path(self) -> str:
        """
        Returns the key as a path if the file was loaded from disk rather
        than from a buffer. Returns an empty string otherwise.
        """
        if self.from_file:
            return self._key
        return ""

    def lines(self) -> tuple[str, ...]:
        with self._lines_lock:
            if self._lines is not None:
                return self._lines
            try:
                lines = split_lines(self._data)
            except ValueError as err:
                raise LineScanError(self._key, str(err)) from err
            self._lines = lines
            return lines

    def __repr__(self) -> str:
        return "LoadedFile({!r}, {} bytes, from_file={})".format(
            self._key, len(self._data), self.from_file)


class LoadedFilePosition:
    """
    A single character within a loaded file.
    Lines are 1-based, characters are a 0-based offset into the line.
    """

    file: LoadedFile
    line: int
    char: int

    def __init__(self, file: LoadedFile, line: int, char: int = 0) -> None:
        self.file = file
        self.line = line
        self.char = char

    def line_text(self) -> str:
        lines = self.file.lines()
        idx = self.line - 1
        if idx < 0 or idx >= len(lines):
            raise IndexError(
                f"line {self.line} out of range for {self.file.key!r} ({len(lines)} lines)")
        return lines[idx]

    def render(self, color: bool = True) -> str:
        text = self.line_text()
        marker = " " * min(self.char, len(text)) + "^"
        header = str(self)
        if color:
            header = colored(header, attrs=['bold'])
            marker = colored(marker, 'red', attrs=['bold'])
        return f"{header}\n{text}\n{marker}"

    def __str__(self) -> str:
        name = self.file.path() or self.file.key
        return f"{name}:{self.line}:{self.char}"

    def __repr__(self):
        return str(self)

    def __hash__(self):
        return hash((self.file.key, self.line, self.char))

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return (
                self.file.key == other.file.key
                and self.line == other.line
                and self.char == other.char
            )
        return NotImplemented
