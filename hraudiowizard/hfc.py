"""High-frequency compensation: rebuilds the spectrum above a lowpass cutoff.

Each STFT frame is searched for spectral peaks below the cutoff. Peaks that
are harmonics of a lower peak are dropped, and the remaining fundamentals
seed synthetic overtones. The spectrum above the cutoff is then replaced by
the smoothed, randomly varied and faded-out overtone magnitudes, keeping the
original phases.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import ArrayLike

from .stft import STFT

logger = logging.getLogger(__name__)

FFT_SIZE = 4096
HOP_SIZE = 2048
BINS = FFT_SIZE // 2 + 1

_MAX_OVERTONES = 12
_HARMONIC_TOLERANCE = 6
_OVERTONE_DECAY = 0.7
_VARIATION_LOW = 0.15125
_MID_SMOOTHING = 3
_SIDE_SMOOTHING = 5

ProgressCallback = Callable[[float], None]


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


@dataclass
class Overtone:
    """Description of the overtone series built from one spectral peak."""

    width: int = 2
    amplitude: float = 0.0
    base_freq: int = 0
    slope: np.ndarray = field(default_factory=lambda: np.zeros(0))
    loop: int = 0
    power: np.ndarray = field(default_factory=lambda: np.zeros(0))


def lowpass_bin(sample_rate: int, lowpass_freq: float) -> int:
    """Return the FFT bin of ``lowpass_freq``, clamped to [0, FFT_SIZE // 2]."""
    if sample_rate <= 0:
        raise ValueError(f"sample rate must be positive, got {sample_rate}")
    index = int(BINS * (lowpass_freq / (sample_rate / 2.0)))
    return max(0, min(index, FFT_SIZE // 2))


def find_peaks(magnitude: ArrayLike, min_distance: int = 4) -> list[int]:
    """Return indices of strict local maxima at least ``min_distance`` apart.

    Peaks are taken in ascending order; a maximum closer than ``min_distance``
    to an already accepted peak is skipped.
    """
    data = np.asarray(magnitude, dtype=np.float64).ravel()
    if data.size < 3:
        return []
    inner = data[1:-1]
    candidates = np.flatnonzero((inner > data[:-2]) & (inner > data[2:])) + 1
    peaks: list[int] = []
    for index in candidates.tolist():
        if not peaks or index - peaks[-1] >= min_distance:
            peaks.append(index)
    return peaks


def _is_harmonic(peak: int, fundamental: int) -> bool:
    highest = FFT_SIZE // (2 * fundamental)
    return any(
        abs(peak - fundamental * k) < _HARMONIC_TOLERANCE for k in range(2, highest + 1)
    )


def remove_harmonics(peaks: Iterable[int]) -> list[int]:
    """Drop every peak lying near a multiple of an earlier kept peak."""
    candidates = list(peaks)
    if any(peak < 1 for peak in candidates):
        raise ValueError("peak bins must be positive")
    kept: list[int] = []
    for peak in candidates:
        if not any(_is_harmonic(peak, fundamental) for fundamental in kept):
            kept.append(peak)
    return kept


def _overtone_for(peak: int, magnitude: np.ndarray) -> Overtone | None:
    size = magnitude.size
    loop = min(_MAX_OVERTONES, _trunc_div(FFT_SIZE // 2 - peak, peak))
    harmonics = magnitude[[peak * step for step in range(1, loop) if peak * step < size]]
    if harmonics.size == 0 or harmonics[0] == 0:
        return None

    count = harmonics.size
    sigma = count / 1.3
    offsets = np.arange(count, dtype=np.float64) - count / 2.0
    gaussian = np.exp(-(offsets * offsets) / (2.0 * sigma * sigma))
    slope = np.zeros(loop * _MAX_OVERTONES, dtype=np.float64)
    filled = min(count, slope.size)
    slope[:filled] = harmonics[:filled] / 12.0 * gaussian[:filled]

    width = 2
    for candidate in (2, 3):
        half = candidate // 2
        if (
            peak - half >= 0
            and peak + half < size
            and abs(magnitude[peak - half] - magnitude[peak + half]) < 4
        ):
            width = candidate
            break

    start = max(0, peak - width // 2)
    end = min(size, peak + width // 2)
    return Overtone(
        width=width,
        base_freq=peak,
        slope=slope,
        loop=loop,
        power=magnitude[start:end].copy(),
    )


def process_peaks(peaks: Iterable[int], magnitude: ArrayLike) -> np.ndarray:
    """Synthesise overtone magnitudes for each peak; returns an array like ``magnitude``."""
    data = np.asarray(magnitude, dtype=np.float64).ravel()
    rebuild = np.zeros(data.size, dtype=np.float64)
    for peak in peaks:
        if peak < 1:
            raise ValueError("peak bins must be positive")
        overtone = _overtone_for(peak, data)
        if overtone is None:
            continue
        half = overtone.width // 2
        for k in range(2, overtone.loop + 2):
            start = overtone.base_freq * k - half
            end = overtone.base_freq * k + half
            if start < 0 or end > rebuild.size or k - 1 >= overtone.slope.size:
                continue
            amplitude = abs(overtone.slope[k - 1]) * _OVERTONE_DECAY ** (k - 2)
            span = min(end - start, overtone.power.size)
            rebuild[start : start + span] += overtone.power[:span] * amplitude
    return rebuild.astype(np.float32)


def flatten_spectrum(signal: ArrayLike, window_size: int = 6) -> np.ndarray:
    """Moving average over ``window_size // 2`` bins each side, shrinking at the edges."""
    data = np.asarray(signal, dtype=np.float64).ravel()
    half = _trunc_div(window_size, 2)
    if half < 0 or data.size == 0:
        return data.astype(np.float32)
    index = np.arange(data.size)
    low = np.maximum(index - half, 0)
    high = np.minimum(index + half, data.size - 1)
    sums = np.concatenate(([0.0], np.cumsum(data)))
    return ((sums[high + 1] - sums[low]) / (high - low + 1)).astype(np.float32)


class HFCompensation:
    """Rebuilds high frequencies of a mid/side pair above a lowpass cutoff."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = np.random.default_rng(seed)

    def process(
        self,
        mid: ArrayLike,
        side: ArrayLike,
        sample_rate: int,
        lowpass_freq: float,
        compressed_mode: bool = False,
        progress: ProgressCallback | None = None,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Return the processed ``(mid, side)`` signals.

        ``compressed_mode`` is accepted for compatibility and does not change
        the result. ``progress`` receives values from 0 up to 1.
        """
        mid_data = np.asarray(mid, dtype=np.float32).ravel()
        side_data = np.asarray(side, dtype=np.float32).ravel()
        if mid_data.size != side_data.size:
            raise ValueError(
                f"mid and side differ in length ({mid_data.size} and {side_data.size})"
            )
        cutoff = lowpass_bin(sample_rate, lowpass_freq)
        logger.info("Processing with lowpass at %s Hz (bin %d)", lowpass_freq, cutoff)

        stft = STFT(FFT_SIZE, HOP_SIZE)
        mid_spec = stft.forward(mid_data)
        side_spec = stft.forward(side_data)

        span = BINS - cutoff
        fade = (1.0 - np.arange(span, dtype=np.float64) / span) ** 3
        frames = len(mid_spec)
        for frame in range(frames):
            if progress is not None:
                progress(frame / frames)
            mid_spec[frame] = self._rebuild_frame(mid_spec[frame], cutoff, _MID_SMOOTHING, fade)
            side_spec[frame] = self._rebuild_frame(
                side_spec[frame], cutoff, _SIDE_SMOOTHING, fade
            )

        mid_out = stft.inverse(mid_spec)
        side_out = stft.inverse(side_spec)
        if progress is not None:
            progress(1.0)
        return mid_out, side_out

    def _rebuild_frame(
        self, spectrum: np.ndarray, cutoff: int, smoothing: int, fade: np.ndarray
    ) -> np.ndarray:
        magnitude = np.abs(spectrum).astype(np.float64)
        peaks = [peak for peak in remove_harmonics(find_peaks(magnitude)) if peak <= cutoff]
        rebuild = flatten_spectrum(process_peaks(peaks, magnitude), smoothing)
        variation = self._rng.uniform(_VARIATION_LOW, 1.0, BINS - cutoff)
        result = spectrum.copy()
        phase = np.angle(spectrum[cutoff:])
        result[cutoff:] = rebuild[cutoff:] * variation * fade * np.exp(1j * phase)
        return result


__all__: Sequence[str] = (
    "FFT_SIZE",
    "HOP_SIZE",
    "Overtone",
    "HFCompensation",
    "lowpass_bin",
    "find_peaks",
    "remove_harmonics",
    "process_peaks",
    "flatten_spectrum",
)