"""Short-time Fourier transform with a Hann window and overlap-add synthesis."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
from numpy.typing import ArrayLike

from .fft import FFT


def hann_window(size: int) -> np.ndarray:
    """Return a symmetric Hann window of ``size`` points."""
    if size < 2:
        raise ValueError(f"window size must be at least 2, got {size}")
    n = np.arange(size, dtype=np.float64)
    return (0.5 * (1.0 - np.cos(2.0 * np.pi * n / (size - 1)))).astype(np.float32)


class STFT:
    """Windowed analysis and synthesis with a fixed FFT size and hop."""

    def __init__(self, fft_size: int, hop_size: int) -> None:
        if hop_size < 1:
            raise ValueError(f"hop size must be positive, got {hop_size}")
        self.fft_size = fft_size
        self.hop_size = hop_size
        self.window = hann_window(fft_size)
        self._fft = FFT(fft_size)

    def forward(self, signal: ArrayLike) -> np.ndarray:
        """Return a complex spectrogram of shape (frames, fft_size // 2 + 1)."""
        data = np.asarray(signal, dtype=np.float32).ravel()
        if data.size < self.fft_size:
            raise ValueError(
                f"signal of {data.size} samples is shorter than the FFT size {self.fft_size}"
            )
        count = (data.size - self.fft_size) // self.hop_size + 1
        starts = np.arange(count) * self.hop_size
        frames = data[starts[:, None] + np.arange(self.fft_size)] * self.window
        return np.array([self._fft.forward(frame) for frame in frames], dtype=np.complex64)

    def inverse(self, spectrogram: Sequence[ArrayLike] | np.ndarray) -> np.ndarray:
        """Overlap-add the frames back into a signal, normalised by the window energy."""
        if len(spectrogram) == 0:
            return np.zeros(0, dtype=np.float32)
        length = (len(spectrogram) - 1) * self.hop_size + self.fft_size
        output = np.zeros(length, dtype=np.float64)
        energy = np.zeros(length, dtype=np.float64)
        window = self.window.astype(np.float64)
        for index, frame in enumerate(spectrogram):
            start = index * self.hop_size
            span = slice(start, start + self.fft_size)
            output[span] += self._fft.inverse(frame) * window
            energy[span] += window * window
        covered = energy > 0.0
        output[covered] /= energy[covered]
        return output.astype(np.float32)