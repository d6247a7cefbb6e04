#-------------------------------------------------------------------#
# Copyright (C) 2019-2023 by Serguei Tarassov <serge@arbinada.com>  #
# Distributed freely under the MIT License                          #
#-------------------------------------------------------------------#

"""
Byte sinks used as scratch space while decoding and escaping text
"""

import logging

from .errors import BufferFullError

logger = logging.getLogger(__name__)

GROWING_BUFFER_CAPACITY = 4096
GROWTH_FACTOR           = 8


class Buffer:
    """
    Byte region with a capacity and a write offset
    """

    def __init__(self, storage, capacity: int) -> None:
        self._used = storage
        self._size = capacity
        self._pos = 0

    def __len__(self) -> int:
        return self._pos

    @property
    def pos(self) -> int:
        return self._pos

    @property
    def capacity(self) -> int:
        return self._size

    def view(self) -> memoryview:
        return memoryview(self._used)[:self._pos]

    def as_bytes(self) -> bytes:
        return bytes(self._used[:self._pos])

    def as_text(self) -> str:
        # Bytes map one-to-one onto code points 0-255
        return self.as_bytes().decode("latin-1")

    def clear(self):
        self._pos = 0


class GrowingBuffer(Buffer):
    """
    Buffer that grows when needed
    """

    def __init__(self, initial_capacity: int = GROWING_BUFFER_CAPACITY) -> None:
        if initial_capacity <= 0:
            raise ValueError(f"Initial capacity must be positive, got {initial_capacity}")
        super().__init__(bytearray(initial_capacity), initial_capacity)

    def _grow(self, needed: int):
        new_size = self._size * GROWTH_FACTOR
        while new_size < needed:
            new_size *= GROWTH_FACTOR
        logger.debug("Growing buffer from %d to %d bytes", self._size, new_size)
        new_buffer = bytearray(new_size)
        new_buffer[:self._pos] = self._used[:self._pos]
        self._used = new_buffer
        self._size = new_size

    def push_back(self, c: int):
        if self._pos == self._size:
            self._grow(self._pos + 1)
        self._used[self._pos] = c
        self._pos += 1

    def extend(self, data):
        end = self._pos + len(data)
        if end > self._size:
            self._grow(end)
        self._used[self._pos:end] = data
        self._pos = end


class ExternalBuffer(Buffer):
    """
    Preallocated buffer over caller-owned memory. Never grows.
    """

    def __init__(self, storage, capacity: int = None) -> None:
        if capacity is None:
            capacity = len(storage)
        elif capacity > len(storage):
            raise ValueError(f"Capacity {capacity} exceeds storage size {len(storage)}")
        super().__init__(storage, capacity)

    def push_back(self, c: int):
        if self._pos == self._size:
            raise BufferFullError("ExternalBuffer.push_back")
        self._used[self._pos] = c
        self._pos += 1

    def extend(self, data):
        end = self._pos + len(data)
        if end > self._size:
            raise BufferFullError("ExternalBuffer.extend")
        self._used[self._pos:end] = data
        self._pos = end
