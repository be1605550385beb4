"""File-level processing: load, upsample, compensate high frequencies, save."""

from __future__ import annotations

import logging
from collections.abc import Callable
from os import PathLike

import numpy as np
from numpy.typing import ArrayLike

from .audio_io import AudioData, AudioIOError, load_file, save_file
from .hfc import HFCompensation
from .resampler import resample_channels

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class ProcessingError(Exception):
    """Raised when a file cannot be processed."""


def stereo_to_mid_side(left: ArrayLike, right: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Return ``((L + R) / 2, (L - R) / 2)``."""
    left_data = np.asarray(left, dtype=np.float32).ravel()
    right_data = np.asarray(right, dtype=np.float32).ravel()
    if left_data.size != right_data.size:
        raise ValueError("left and right channels differ in length")
    return (left_data + right_data) * 0.5, (left_data - right_data) * 0.5


def mid_side_to_stereo(mid: ArrayLike, side: ArrayLike) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(M + S, M - S)``."""
    mid_data = np.asarray(mid, dtype=np.float32).ravel()
    side_data = np.asarray(side, dtype=np.float32).ravel()
    if mid_data.size != side_data.size:
        raise ValueError("mid and side signals differ in length")
    return mid_data + side_data, mid_data - side_data


class AudioProcessor:
    """Runs the enhancement chain on whole audio files."""

    def __init__(self, seed: int | None = None) -> None:
        self._hfc = HFCompensation(seed)

    def process_file(
        self,
        input_path: str | PathLike[str],
        output_path: str | PathLike[str],
        enable_hfc: bool,
        lowpass_freq: float,
        compressed_mode: bool,
        sample_rate_multiplier: int = 2,
        progress: ProgressCallback | None = None,
    ) -> AudioData:
        """Process ``input_path`` into ``output_path`` and return the written audio."""
        try:
            audio = load_file(input_path)
        except AudioIOError as exc:
            raise ProcessingError(f"Failed to load audio file: {input_path}: {exc}") from exc
        logger.info(
            "Loaded audio: %d channels, %d samples, %d Hz",
            audio.num_channels,
            audio.num_samples,
            audio.sample_rate,
        )

        if enable_hfc and sample_rate_multiplier > 1:
            target = audio.sample_rate * sample_rate_multiplier
            logger.info("Upsampling from %d Hz to %d Hz", audio.sample_rate, target)
            audio = AudioData(resample_channels(audio.channels, audio.sample_rate, target), target)

        if enable_hfc:
            try:
                audio = self.apply_hfc(audio, lowpass_freq, compressed_mode, progress)
            except ValueError as exc:
                raise ProcessingError(f"High frequency compensation failed: {exc}") from exc

        if audio.num_channels == 0 or audio.num_samples == 0:
            raise ProcessingError("Audio data is empty after processing")

        try:
            save_file(output_path, audio.channels, audio.sample_rate)
        except AudioIOError as exc:
            raise ProcessingError(f"Failed to save audio file: {output_path}: {exc}") from exc
        return audio

    def apply_hfc(
        self,
        audio: AudioData,
        lowpass_freq: float,
        compressed_mode: bool = False,
        progress: ProgressCallback | None = None,
    ) -> AudioData:
        """Apply compensation in the mid/side domain; non-stereo audio is returned as is."""
        if audio.num_channels != 2:
            logger.error("HFC requires stereo input")
            return audio
        mid, side = stereo_to_mid_side(audio.channels[0], audio.channels[1])
        mid, side = self._hfc.process(
            mid, side, audio.sample_rate, lowpass_freq, compressed_mode, progress
        )
        left, right = mid_side_to_stereo(mid, side)
        return AudioData([left, right], audio.sample_rate)