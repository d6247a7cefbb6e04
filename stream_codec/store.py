#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Sequential binary stores that value codecs are layered on
"""

import io

from .compact_size import write_compact_size, read_compact_size
from .errors import CorruptEncodingError


class StoreWriter:
    def __init__(self, stream=None) -> None:
        self._stream = io.BytesIO() if stream is None else stream
        self._offset = 0

    @property
    def stream(self):
        return self._stream

    @property
    def offset(self) -> int:
        return self._offset

    def getvalue(self) -> bytes:
        return self._stream.getvalue()

    def write_bytes(self, data: bytes):
        self._stream.write(data)
        self._offset += len(data)

    def write_byte(self, c: int):
        self.write_bytes(bytes((c,)))

    def write_compact_size(self, value: int) -> int:
        return write_compact_size(self, value)

    def write_string(self, text: str):
        data = text.encode("utf-8")
        write_compact_size(self, len(data))
        self.write_bytes(data)


class StoreReader:
    def __init__(self, stream) -> None:
        if isinstance(stream, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(stream)
        self._stream = stream
        self._offset = 0

    @property
    def offset(self) -> int:
        return self._offset

    def read_bytes(self, n: int) -> bytes:
        data = self._stream.read(n)
        if data is None or len(data) != n:
            got = 0 if data is None else len(data)
            raise CorruptEncodingError(f"Truncated store at offset {self._offset}: wanted {n} bytes, got {got}")
        self._offset += n
        return data

    def read_byte(self) -> int:
        return self.read_bytes(1)[0]

    def read_compact_size(self) -> int:
        return read_compact_size(self)

    def read_string(self) -> str:
        size = read_compact_size(self)
        data = self.read_bytes(size)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptEncodingError(f"Invalid UTF-8 string in store: {exc}") from None
