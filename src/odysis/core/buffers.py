"""Views over raw little-endian numeric buffers.

Vertex and field arrays arrive as float32 bytes, index arrays as uint32 bytes.
The helpers wrap them in numpy arrays without copying.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from .errors import DimensionMismatch

FLOAT32 = np.dtype("<f4")
UINT32 = np.dtype("<u4")


def _view(buffer: bytes | bytearray | memoryview, dtype: np.dtype, count: int | None) -> NDArray:
    nbytes = memoryview(buffer).nbytes
    if count is None:
        if nbytes % dtype.itemsize:
            raise DimensionMismatch(
                f"Buffer of {nbytes} bytes is not a whole number of {dtype} elements"
            )
        count = nbytes // dtype.itemsize
    elif count < 0 or count * dtype.itemsize > nbytes:
        raise DimensionMismatch(
            f"Buffer of {nbytes} bytes cannot hold {count} {dtype} elements"
        )
    return np.frombuffer(buffer, dtype=dtype, count=count)


def float32_view(buffer: bytes | bytearray | memoryview, count: int | None = None) -> NDArray[np.float32]:
    """View a byte buffer as little-endian float32 values.

    Args:
        buffer: Raw bytes (read-only buffers give read-only arrays)
        count: Declared element count; defaults to the whole buffer

    Raises:
        DimensionMismatch: If the buffer is too short for ``count``
    """
    return _view(buffer, FLOAT32, count)


def uint32_view(buffer: bytes | bytearray | memoryview, count: int | None = None) -> NDArray[np.uint32]:
    """View a byte buffer as little-endian uint32 values."""
    return _view(buffer, UINT32, count)
