import struct
import wave

import numpy as np
import pytest

from hraudiowizard.audio_io import (
    AudioData,
    AudioIOError,
    deinterleave_channels,
    interleave_channels,
    load_file,
    sanitize_samples,
    save_file,
)


def test_interleave_orders_by_frame():
    out = interleave_channels([[1.0, 2.0], [3.0, 4.0]])
    np.testing.assert_array_equal(out, [1.0, 3.0, 2.0, 4.0])


def test_interleave_empty():
    assert interleave_channels([]).size == 0
    assert interleave_channels([[]]).size == 0


def test_interleave_rejects_unequal_lengths():
    with pytest.raises(ValueError):
        interleave_channels([[1.0, 2.0], [3.0]])


def test_interleave_round_trip():
    rng = np.random.default_rng(2)
    channels = [rng.standard_normal(17).astype(np.float32) for _ in range(3)]
    restored = deinterleave_channels(interleave_channels(channels), 3)
    assert len(restored) == 3
    for original, back in zip(channels, restored):
        np.testing.assert_array_equal(back, original)


def test_deinterleave_rejects_bad_sizes():
    with pytest.raises(ValueError):
        deinterleave_channels([1.0, 2.0, 3.0], 2)
    with pytest.raises(ValueError):
        deinterleave_channels([1.0], 0)


def test_sanitize_samples_fixes_and_counts():
    data, nan_count, inf_count, clamp_count = sanitize_samples(
        [np.nan, np.inf, -np.inf, 2.0, -3.0, 0.25]
    )
    np.testing.assert_array_equal(data, [0.0, 1.0, -1.0, 1.0, -1.0, 0.25])
    assert (nan_count, inf_count, clamp_count) == (1, 2, 2)


def test_sanitize_does_not_modify_input():
    original = np.array([5.0, np.nan], dtype=np.float32)
    sanitize_samples(original)
    assert original[0] == 5.0
    assert np.isnan(original[1])


def test_save_writes_float_wav_header(tmp_path):
    target = tmp_path / "out.wav"
    save_file(target, [[0.0, 0.5], [0.25, -0.5]], 44100)
    raw = target.read_bytes()
    assert raw[:4] == b"RIFF"
    assert raw[8:12] == b"WAVE"
    assert struct.unpack_from("<I", raw, 4)[0] == len(raw) - 8
    assert struct.unpack_from("<HHI", raw, 20) == (3, 2, 44100)


def test_save_load_round_trip(tmp_path):
    rng = np.random.default_rng(4)
    channels = [rng.uniform(-1.0, 1.0, 100).astype(np.float32) for _ in range(2)]
    target = tmp_path / "round.wav"
    save_file(target, channels, 48000)
    audio = load_file(target)
    assert isinstance(audio, AudioData)
    assert audio.sample_rate == 48000
    assert audio.num_channels == 2
    assert audio.num_samples == 100
    for original, back in zip(channels, audio.channels):
        np.testing.assert_array_equal(back, original)


def test_save_sanitizes_before_writing(tmp_path):
    target = tmp_path / "clamped.wav"
    save_file(target, [[2.0, np.nan, -np.inf, 0.5]], 8000)
    audio = load_file(target)
    np.testing.assert_array_equal(audio.channels[0], [1.0, 0.0, -1.0, 0.5])


def test_save_empty_raises(tmp_path):
    with pytest.raises(AudioIOError):
        save_file(tmp_path / "empty.wav", [], 44100)
    with pytest.raises(AudioIOError):
        save_file(tmp_path / "empty.wav", [[]], 44100)


def test_save_invalid_rate_raises(tmp_path):
    with pytest.raises(AudioIOError):
        save_file(tmp_path / "bad.wav", [[0.1]], 0)


def test_save_into_missing_directory_raises(tmp_path):
    with pytest.raises(AudioIOError):
        save_file(tmp_path / "missing" / "out.wav", [[0.1]], 44100)


def test_load_16_bit_pcm(tmp_path):
    target = tmp_path / "pcm.wav"
    with wave.open(str(target), "wb") as writer:
        writer.setnchannels(2)
        writer.setsampwidth(2)
        writer.setframerate(8000)
        writer.writeframes(struct.pack("<4h", 16384, -32768, 0, 16384))
    audio = load_file(target)
    assert audio.sample_rate == 8000
    np.testing.assert_array_equal(audio.channels[0], [0.5, 0.0])
    np.testing.assert_array_equal(audio.channels[1], [-1.0, 0.5])


def test_load_24_bit_pcm_sign_extension(tmp_path):
    target = tmp_path / "pcm24.wav"
    with wave.open(str(target), "wb") as writer:
        writer.setnchannels(1)
        writer.setsampwidth(3)
        writer.setframerate(8000)
        writer.writeframes(b"\x00\x00\x80" + b"\x00\x00\x40")
    audio = load_file(target)
    np.testing.assert_array_equal(audio.channels[0], [-1.0, 0.5])


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(AudioIOError):
        load_file(tmp_path / "nope.wav")


def test_load_non_wav_raises(tmp_path):
    target = tmp_path / "junk.wav"
    target.write_bytes(b"this is not audio at all")
    with pytest.raises(AudioIOError):
        load_file(target)


def test_load_truncated_file_raises(tmp_path):
    target = tmp_path / "cut.wav"
    save_file(target, [[0.1, 0.2, 0.3, 0.4]], 8000)
    target.write_bytes(target.read_bytes()[:-4])
    with pytest.raises(AudioIOError, match="expected"):
        load_file(target)