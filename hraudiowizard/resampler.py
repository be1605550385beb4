"""Linear-interpolation sample-rate conversion."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from numpy.typing import ArrayLike


def resample(samples: ArrayLike, input_rate: int, output_rate: int) -> np.ndarray:
    """Resample one channel from ``input_rate`` to ``output_rate`` by linear interpolation."""
    if input_rate <= 0 or output_rate <= 0:
        raise ValueError(f"sample rates must be positive, got {input_rate} and {output_rate}")
    data = np.asarray(samples, dtype=np.float32).ravel()
    if input_rate == output_rate:
        return data.copy()

    ratio = output_rate / input_rate
    size = int(data.size * ratio)
    output = np.zeros(size, dtype=np.float64)
    if size == 0:
        return output.astype(np.float32)

    position = np.arange(size, dtype=np.float64) / ratio
    index = np.floor(position).astype(np.int64)
    fraction = position - index

    inner = index < data.size - 1
    left = index[inner]
    output[inner] = data[left] * (1.0 - fraction[inner]) + data[left + 1] * fraction[inner]

    last = index == data.size - 1
    output[last] = data[index[last]]
    return output.astype(np.float32)


def resample_channels(
    channels: Iterable[ArrayLike], input_rate: int, output_rate: int
) -> list[np.ndarray]:
    """Resample every channel independently."""
    return [resample(channel, input_rate, output_rate) for channel in channels]