"""Reading and writing WAV audio as per-channel float arrays."""

from __future__ import annotations

import logging
import struct
from collections.abc import Sequence
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

import numpy as np
from numpy.typing import ArrayLike

logger = logging.getLogger(__name__)

_FORMAT_PCM = 0x0001
_FORMAT_FLOAT = 0x0003
_FORMAT_EXTENSIBLE = 0xFFFE


class AudioIOError(Exception):
    """Raised when audio cannot be read or written."""


@dataclass
class AudioData:
    """Decoded audio: one float32 array per channel plus the sample rate."""

    channels: list[np.ndarray] = field(default_factory=list)
    sample_rate: int = 0

    @property
    def num_channels(self) -> int:
        return len(self.channels)

    @property
    def num_samples(self) -> int:
        return len(self.channels[0]) if self.channels else 0


@dataclass(frozen=True)
class _WavFormat:
    tag: int
    channels: int
    sample_rate: int
    block_align: int
    bits: int


def interleave_channels(channels: Sequence[ArrayLike]) -> np.ndarray:
    """Merge channels into one frame-ordered array (L0 R0 L1 R1 ...)."""
    if len(channels) == 0 or len(channels[0]) == 0:
        return np.zeros(0, dtype=np.float32)
    arrays = [np.asarray(channel, dtype=np.float32).ravel() for channel in channels]
    if any(array.size != arrays[0].size for array in arrays):
        raise ValueError("all channels must have the same length")
    return np.stack(arrays, axis=1).ravel()


def deinterleave_channels(interleaved: ArrayLike, num_channels: int) -> list[np.ndarray]:
    """Split a frame-ordered array into ``num_channels`` separate arrays."""
    if num_channels < 1:
        raise ValueError(f"channel count must be positive, got {num_channels}")
    data = np.asarray(interleaved, dtype=np.float32).ravel()
    if data.size % num_channels:
        raise ValueError(
            f"{data.size} samples do not divide into {num_channels} channels"
        )
    frames = data.reshape(-1, num_channels)
    return [np.ascontiguousarray(column) for column in frames.T]


def sanitize_samples(samples: ArrayLike) -> tuple[np.ndarray, int, int, int]:
    """Replace NaN with 0, infinities with ±1 and clamp to [-1, 1].

    Returns the cleaned copy and the counts of NaN, infinite and clamped values.
    """
    data = np.array(samples, dtype=np.float32)
    nan = np.isnan(data)
    inf = np.isinf(data)
    over = np.isfinite(data) & (np.abs(data) > 1.0)
    data[nan] = 0.0
    data[inf] = np.sign(data[inf])
    data[over] = np.sign(data[over])
    return data, int(nan.sum()), int(inf.sum()), int(over.sum())


def _parse_fmt(body: bytes) -> _WavFormat:
    if len(body) < 16:
        raise AudioIOError("Error opening file: malformed fmt chunk")
    tag, channels, rate, _byte_rate, block_align, bits = struct.unpack_from("<HHIIHH", body)
    if tag == _FORMAT_EXTENSIBLE:
        if len(body) < 26:
            raise AudioIOError("Error opening file: malformed extensible fmt chunk")
        (tag,) = struct.unpack_from("<H", body, 24)
    if channels < 1 or rate < 1:
        raise AudioIOError("Error opening file: invalid channel count or sample rate")
    if bits % 8 or block_align != channels * (bits // 8):
        raise AudioIOError(f"Error opening file: unsupported sample layout ({bits} bits)")
    return _WavFormat(tag, channels, rate, block_align, bits)


def _read_chunks(raw: bytes) -> tuple[_WavFormat, bytes, int]:
    if len(raw) < 12 or raw[:4] != b"RIFF" or raw[8:12] != b"WAVE":
        raise AudioIOError("Error opening file: not a RIFF/WAVE file")
    fmt: _WavFormat | None = None
    pos = 12
    while pos + 8 <= len(raw):
        chunk_id = raw[pos : pos + 4]
        (size,) = struct.unpack_from("<I", raw, pos + 4)
        body = raw[pos + 8 : pos + 8 + size]
        if chunk_id == b"fmt ":
            fmt = _parse_fmt(body)
        elif chunk_id == b"data":
            if fmt is None:
                raise AudioIOError("Error opening file: data chunk before fmt chunk")
            return fmt, body, size
        pos += 8 + size + (size & 1)
    if fmt is None:
        raise AudioIOError("Error opening file: missing fmt chunk")
    raise AudioIOError("Error opening file: missing data chunk")


def _decode(fmt: _WavFormat, payload: bytes) -> np.ndarray:
    if fmt.tag == _FORMAT_PCM:
        if fmt.bits == 8:
            return (np.frombuffer(payload, dtype=np.uint8).astype(np.float64) - 128.0) / 128.0
        if fmt.bits == 16:
            return np.frombuffer(payload, dtype="<i2") / 32768.0
        if fmt.bits == 24:
            triples = np.frombuffer(payload, dtype=np.uint8).reshape(-1, 3).astype(np.int32)
            values = triples[:, 0] | (triples[:, 1] << 8) | (triples[:, 2] << 16)
            values = (values ^ 0x800000) - 0x800000
            return values / 8388608.0
        if fmt.bits == 32:
            return np.frombuffer(payload, dtype="<i4") / 2147483648.0
    elif fmt.tag == _FORMAT_FLOAT:
        if fmt.bits == 32:
            return np.frombuffer(payload, dtype="<f4")
        if fmt.bits == 64:
            return np.frombuffer(payload, dtype="<f8")
    raise AudioIOError(
        f"Error opening file: unsupported format 0x{fmt.tag:04x} with {fmt.bits} bits"
    )


def load_file(path: str | PathLike[str]) -> AudioData:
    """Read a WAV file into float32 channels normalised to [-1, 1)."""
    try:
        raw = Path(path).read_bytes()
    except OSError as exc:
        raise AudioIOError(f"Error opening file: {exc}") from exc

    fmt, payload, declared = _read_chunks(raw)
    expected = declared // fmt.block_align
    available = len(payload) // fmt.block_align
    if available != expected:
        raise AudioIOError(
            f"Error reading file: expected {expected} frames, got {available}"
        )
    samples = _decode(fmt, payload[: expected * fmt.block_align]).astype(np.float32)
    return AudioData(deinterleave_channels(samples, fmt.channels), fmt.sample_rate)


def save_file(
    path: str | PathLike[str],
    channels: Sequence[ArrayLike],
    sample_rate: int,
    bit_depth: int = 24,
) -> None:
    """Write channels as a 32-bit float WAV file.

    Samples are sanitised first (see ``sanitize_samples``). ``bit_depth`` is
    accepted but the output is always 32-bit float.
    """
    if len(channels) == 0 or len(channels[0]) == 0:
        raise AudioIOError("No audio data to save")
    num_channels = len(channels)
    if sample_rate <= 0 or num_channels > 0xFFFF:
        raise AudioIOError("Invalid format specification")
    try:
        interleaved = interleave_channels(channels)
    except ValueError as exc:
        raise AudioIOError(str(exc)) from exc

    samples, nan_count, inf_count, clamp_count = sanitize_samples(interleaved)
    if nan_count or inf_count or clamp_count:
        logger.warning(
            "Fixed %d NaN values, %d infinite values and %d out-of-range values",
            nan_count,
            inf_count,
            clamp_count,
        )

    frames = samples.size // num_channels
    block_align = num_channels * 4
    payload = samples.astype("<f4").tobytes()
    fmt_chunk = b"fmt " + struct.pack(
        "<IHHIIHHH",
        18,
        _FORMAT_FLOAT,
        num_channels,
        sample_rate,
        sample_rate * block_align,
        block_align,
        32,
        0,
    )
    fact_chunk = b"fact" + struct.pack("<II", 4, frames)
    data_chunk = b"data" + struct.pack("<I", len(payload)) + payload
    body = b"WAVE" + fmt_chunk + fact_chunk + data_chunk
    header = b"RIFF" + struct.pack("<I", len(body))
    try:
        Path(path).write_bytes(header + body)
    except OSError as exc:
        raise AudioIOError(f"Error creating file: {exc}") from exc
    logger.debug("Wrote %d frames at %d Hz to %s", frames, sample_rate, path)