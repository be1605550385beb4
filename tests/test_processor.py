import numpy as np
import pytest

from hraudiowizard.audio_io import AudioData, load_file, save_file
from hraudiowizard.processor import (
    AudioProcessor,
    ProcessingError,
    mid_side_to_stereo,
    stereo_to_mid_side,
)
from hraudiowizard.resampler import resample


def _tone(length, bin_index=30, amplitude=0.5):
    n = np.arange(length)
    return (amplitude * np.sin(2 * np.pi * bin_index * n / 4096)).astype(np.float32)


def test_mid_side_pinned():
    mid, side = stereo_to_mid_side([1.0, 0.0], [0.0, 1.0])
    assert np.allclose(mid, [0.5, 0.5])
    assert np.allclose(side, [0.5, -0.5])


def test_mid_side_round_trip():
    rng = np.random.default_rng(4)
    left = rng.uniform(-1, 1, 300).astype(np.float32)
    right = rng.uniform(-1, 1, 300).astype(np.float32)
    back_left, back_right = mid_side_to_stereo(*stereo_to_mid_side(left, right))
    assert np.allclose(back_left, left, atol=1e-6)
    assert np.allclose(back_right, right, atol=1e-6)


def test_mid_side_length_mismatch():
    with pytest.raises(ValueError):
        stereo_to_mid_side([1.0, 2.0], [1.0])
    with pytest.raises(ValueError):
        mid_side_to_stereo([1.0], [1.0, 2.0])


def test_without_hfc_copies_audio(tmp_path):
    source = tmp_path / "in.wav"
    target = tmp_path / "out.wav"
    left, right = _tone(5000), _tone(5000, 45)
    save_file(source, [left, right], 44100)
    AudioProcessor(seed=0).process_file(source, target, False, 16000, False, 4)
    result = load_file(target)
    assert result.sample_rate == 44100
    assert np.array_equal(result.channels[0], left)
    assert np.array_equal(result.channels[1], right)


def test_hfc_upsamples_and_keeps_identical_channels(tmp_path):
    source = tmp_path / "in.wav"
    target = tmp_path / "out.wav"
    tone = _tone(8192)
    save_file(source, [tone, tone], 44100)
    seen = []
    written = AudioProcessor(seed=0).process_file(
        source, target, True, 16000, False, 2, seen.append
    )
    result = load_file(target)
    assert result.sample_rate == 44100 * 2
    assert result.num_samples == 8192 * 2
    assert written.sample_rate == result.sample_rate
    assert np.array_equal(result.channels[0], result.channels[1])
    assert seen[-1] == 1.0
    assert seen == sorted(seen)


def test_mono_is_upsampled_without_hfc(tmp_path):
    source = tmp_path / "mono.wav"
    target = tmp_path / "out.wav"
    tone = _tone(6000)
    save_file(source, [tone], 22050)
    AudioProcessor().process_file(source, target, True, 8000, False, 3)
    result = load_file(target)
    assert result.num_channels == 1
    assert result.sample_rate == 22050 * 3
    assert np.array_equal(result.channels[0], resample(tone, 22050, 22050 * 3))


def test_missing_input_raises(tmp_path):
    with pytest.raises(ProcessingError):
        AudioProcessor().process_file(tmp_path / "absent.wav", tmp_path / "o.wav", True, 16000, False)


def test_short_stereo_input_raises(tmp_path):
    source = tmp_path / "short.wav"
    save_file(source, [_tone(1000), _tone(1000)], 44100)
    with pytest.raises(ProcessingError):
        AudioProcessor().process_file(source, tmp_path / "o.wav", True, 16000, False, 2)
    assert not (tmp_path / "o.wav").exists()


def test_apply_hfc_leaves_mono_alone():
    audio = AudioData([_tone(8192)], 44100)
    result = AudioProcessor().apply_hfc(audio, 16000, False)
    assert result.num_channels == 1
    assert np.array_equal(result.channels[0], audio.channels[0])


def test_apply_hfc_stereo_shape():
    audio = AudioData([_tone(8192), _tone(8192, 70)], 48000)
    result = AudioProcessor(seed=2).apply_hfc(audio, 12000, True)
    assert result.num_channels == 2
    assert result.sample_rate == 48000
    assert result.num_samples == 8192
    assert np.isfinite(result.channels[0]).all()