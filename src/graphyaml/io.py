"""Input and output collaborators around the parser and the serializer.

All input is read into memory before parsing starts and all output is
buffered until an explicit flush.
"""

from __future__ import annotations

import io
import logging
import os
import pathlib
from typing import Any
from typing import Protocol
from typing import runtime_checkable

from graphyaml.config import YamlConfig
from graphyaml.errors import YamlError
from graphyaml.model import YamlElement
from graphyaml.parser import YamlParser
from graphyaml.serializer import render_document

logger = logging.getLogger(__name__)


@runtime_checkable
class SupportsRead(Protocol):
    def read(self) -> str | bytes: ...


@runtime_checkable
class SupportsWrite(Protocol):
    def write(self, data: Any, /) -> Any: ...


class YamlReader:
    """Reads documents from text, bytes, a file path or a readable stream.

    A ``str`` source is the document text itself; use a :class:`pathlib.Path`
    to read a file. Streams are drained at construction and left open.
    """

    def __init__(
        self,
        source: str | bytes | os.PathLike[str] | SupportsRead,
        config: YamlConfig | None = None,
    ) -> None:
        self.config = config if config is not None else YamlConfig.DEFAULT
        self._text = self._drain(source)
        self._closed = False

    def _drain(self, source: str | bytes | os.PathLike[str] | SupportsRead) -> str:
        if isinstance(source, str):
            return source
        if isinstance(source, os.PathLike):
            data: str | bytes = pathlib.Path(source).read_bytes()
        else:
            data = source.read()
        if isinstance(data, str):
            return data
        try:
            return data.decode(self.config.encoding)
        except UnicodeDecodeError as exc:
            msg = f"input is not valid {self.config.encoding}"
            raise YamlError(msg) from exc

    @property
    def closed(self) -> bool:
        return self._closed

    def read_document(self) -> YamlElement:
        """Parse the whole input as one document with a fresh anchor table.

        Raises:
            YamlError: If the reader was closed.
            YamlSyntaxError: If the input is not a well-formed document.
        """
        if self._closed:
            msg = "cannot read from a closed YamlReader"
            raise YamlError(msg)
        return YamlParser(self._text, self.config).read_document()

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> YamlReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class YamlWriter:
    """Buffers rendered documents and pushes them to a sink on flush.

    A :class:`pathlib.Path` sink is opened (and truncated) by the writer and
    closed with it; stream sinks stay open. Binary streams receive text
    encoded with ``config.encoding``.
    """

    def __init__(
        self,
        sink: os.PathLike[str] | SupportsWrite,
        config: YamlConfig | None = None,
    ) -> None:
        self.config = config if config is not None else YamlConfig.DEFAULT
        self._buffer: list[str] = []
        self._closed = False
        if isinstance(sink, os.PathLike):
            self._stream: Any = pathlib.Path(sink).open("w", encoding=self.config.encoding)
            self._owns_stream = True
            self._binary = False
        else:
            self._stream = sink
            self._owns_stream = False
            self._binary = isinstance(sink, (io.RawIOBase, io.BufferedIOBase))

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, value: Any) -> None:
        """Render ``value`` (an element or plain data) into the buffer.

        Raises:
            YamlError: If the writer was closed.
            YamlDumpError: If ``value`` cannot be represented.
        """
        if self._closed:
            msg = "cannot write to a closed YamlWriter"
            raise YamlError(msg)
        self._buffer.append(render_document(value, self.config))

    def flush(self) -> None:
        """Push everything buffered so far to the sink in one write."""
        if not self._buffer:
            return
        text = "".join(self._buffer)
        self._buffer.clear()
        self._stream.write(text.encode(self.config.encoding) if self._binary else text)
        flush = getattr(self._stream, "flush", None)
        if callable(flush):
            flush()
        logger.debug("flushed %d characters", len(text))

    def close(self) -> None:
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._closed = True
            if self._owns_stream:
                self._stream.close()

    def __enter__(self) -> YamlWriter:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
