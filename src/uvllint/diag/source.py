from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Span:
    start_offset: int
    end_offset: int
    line: int
    col: int
    end_line: int
    end_col: int
    filename: str = "<input>"


class SourceText:
    def __init__(self, text: str, filename: str = "<input>") -> None:
        self.text = text
        self.filename = filename
        self._lines = text.split("\n")
        self._line_starts = [0]
        for idx, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(idx + 1)

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]

    def position(self, offset: int) -> tuple[int, int]:
        offset = max(0, min(offset, len(self.text)))
        line_idx = bisect_right(self._line_starts, offset) - 1
        return line_idx + 1, offset - self._line_starts[line_idx] + 1

    def span(self, start: int, end: int) -> Span:
        line, col = self.position(start)
        end_line, end_col = self.position(max(start, end))
        return Span(
            start_offset=start,
            end_offset=end,
            line=line,
            col=col,
            end_line=end_line,
            end_col=end_col,
            filename=self.filename,
        )

    def line_text(self, line: int) -> str:
        if line < 1 or line > len(self._lines):
            return ""
        return self._lines[line - 1].rstrip("\r")

    @property
    def line_count(self) -> int:
        return len(self._lines)


class SourceRepository:
    def __init__(self) -> None:
        self._cache: dict[str, SourceText | None] = {}

    def remember(self, source: SourceText) -> SourceText:
        self._cache[source.filename] = source
        return source

    def get(self, filename: str) -> SourceText | None:
        if filename in self._cache:
            return self._cache[filename]
        if filename.startswith("<") and filename.endswith(">"):
            self._cache[filename] = None
            return None
        try:
            path = Path(filename)
            if not path.exists() or not path.is_file():
                self._cache[filename] = None
                return None
            text = path.read_text(encoding="utf-8")
        except OSError:
            self._cache[filename] = None
            return None
        source = SourceText(text=text, filename=filename)
        self._cache[filename] = source
        return source
