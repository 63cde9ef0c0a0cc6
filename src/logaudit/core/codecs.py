"""
Decompression codecs for log files.

Each codec turns a file on disk into a text line stream. The codec is chosen
from the file suffix; anything not recognised is read as plain text. The
backing stdlib module for a compressed codec is imported lazily so that an
interpreter built without, say, liblzma only fails the ``.xz`` files.

Registered codecs::

    plain   — any suffix not listed below
    gzip    — .gz
    bzip2   — .bz2
    xz      — .xz

Text is decoded as UTF-8 with ``surrogateescape`` so undecodable bytes are
carried through to the aggregate unchanged, as are carriage returns.
"""

from __future__ import annotations

import importlib
import importlib.util
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, ClassVar

ENCODING = "utf-8"
ERRORS = "surrogateescape"
# Lines end at "\n" only; "\r" and CRLF pass through untranslated.
NEWLINE = "\n"


class Codec(ABC):
    name: ClassVar[str] = ""
    suffix: ClassVar[str] = ""
    module: ClassVar[str] = ""
    requires: ClassVar[str] = ""  # C extension the module needs at import time

    @property
    def available(self) -> bool:
        """True when the interpreter was built with the backing extension."""
        if not self.requires:
            return True
        try:
            return importlib.util.find_spec(self.requires) is not None
        except (ImportError, ValueError):
            return False

    @contextmanager
    def open_lines(self, path: Path) -> Iterator[IO[str]]:
        """Open ``path`` as a decoded text stream of lines."""
        fh = self._open(path)
        try:
            yield fh
        finally:
            fh.close()

    def decode_errors(self) -> tuple[type[Exception], ...]:
        """Exception types that mean the file is corrupt or unreadable."""
        return (OSError, EOFError)

    @abstractmethod
    def _open(self, path: Path) -> IO[str]: ...


class CodecRegistry:
    """Suffix → codec lookup. Codecs register themselves at import time."""

    _by_suffix: ClassVar[dict[str, Codec]] = {}
    _by_name: ClassVar[dict[str, Codec]] = {}

    @classmethod
    def register(cls, codec_cls: type[Codec]) -> type[Codec]:
        codec = codec_cls()
        cls._by_name[codec.name] = codec
        if codec.suffix:
            cls._by_suffix[codec.suffix] = codec
        return codec_cls

    @classmethod
    def for_path(cls, path: Path) -> Codec:
        return cls._by_suffix.get(path.suffix, cls._by_name["plain"])

    @classmethod
    def get(cls, name: str) -> Codec:
        return cls._by_name[name]

    @classmethod
    def list_all(cls) -> dict[str, Codec]:
        return dict(cls._by_name)


@CodecRegistry.register
class PlainCodec(Codec):
    name = "plain"

    def _open(self, path: Path) -> IO[str]:
        return open(path, encoding=ENCODING, errors=ERRORS, newline=NEWLINE)


class _ModuleCodec(Codec):
    """Codec backed by a stdlib module exposing ``open(path, "rt", ...)``."""

    def _open(self, path: Path) -> IO[str]:
        mod = importlib.import_module(self.module)
        return mod.open(path, "rt", encoding=ENCODING, errors=ERRORS, newline=NEWLINE)


@CodecRegistry.register
class GzipCodec(_ModuleCodec):
    name = "gzip"
    suffix = ".gz"
    module = "gzip"
    requires = "zlib"

    def decode_errors(self) -> tuple[type[Exception], ...]:
        import zlib

        return (*super().decode_errors(), zlib.error)


@CodecRegistry.register
class Bzip2Codec(_ModuleCodec):
    name = "bzip2"
    suffix = ".bz2"
    module = "bz2"
    requires = "_bz2"


@CodecRegistry.register
class XzCodec(_ModuleCodec):
    name = "xz"
    suffix = ".xz"
    module = "lzma"
    requires = "_lzma"

    def decode_errors(self) -> tuple[type[Exception], ...]:
        import lzma

        return (*super().decode_errors(), lzma.LZMAError)


def codec_for(path: Path) -> Codec:
    """Return the codec that decodes ``path``, selected by suffix."""
    return CodecRegistry.for_path(path)
