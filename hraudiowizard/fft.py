"""Fixed-size real FFT returning the non-negative half of the spectrum."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike


class FFT:
    """Real-to-complex transform of a fixed size.

    The forward transform yields ``size // 2 + 1`` bins (DC up to Nyquist);
    the inverse rebuilds the full spectrum by Hermitian mirroring.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"FFT size must be positive, got {size}")
        self.size = size
        self.bins = size // 2 + 1

    def forward(self, samples: ArrayLike) -> np.ndarray:
        """Transform real samples, zero-padded or truncated to the FFT size."""
        source = np.asarray(samples, dtype=np.float64).ravel()[: self.size]
        frame = np.zeros(self.size, dtype=np.float64)
        frame[: source.size] = source
        return np.fft.fft(frame)[: self.bins].astype(np.complex64)

    def inverse(self, spectrum: ArrayLike) -> np.ndarray:
        """Transform a half spectrum back to ``size`` real samples, scaled by 1/size."""
        source = np.asarray(spectrum, dtype=np.complex128).ravel()[: self.bins]
        full = np.zeros(self.size, dtype=np.complex128)
        full[: source.size] = source
        mirror = np.arange(1, self.size // 2)
        full[self.size - mirror] = np.conj(full[mirror])
        return np.fft.ifft(full).real.astype(np.float32)