# hraudiowizard

Restores high-frequency content that lossy encoding or low sample rates have
cut away from stereo recordings.

Each file is upsampled by a chosen multiplier with linear interpolation. It is
then split into mid and side signals and analysed with a Hann-windowed
short-time Fourier transform (4096-point FFT, hop of 2048). In every frame the
package finds the spectral peaks at or below the lowpass bin and drops peaks
that are harmonics of lower ones. The remaining peaks seed overtones with
decaying amplitude. The spectrum above the cutoff is replaced by these
overtones, after smoothing, random variation and a fade-out, and the original
phases are kept. The result is written next to the input as a 32-bit float WAV
file named `<name>_enhanced<ext>`.

## Installation

```
pip install .
```

The only runtime dependency is numpy.

## Command line

```
hraudiowizard song.wav other.wav
```

Options:

- `--lowpass HZ`: the lowpass frequency, 6000 to 192000 (default 16000).
- `--multiplier N`: the sample rate multiplier, 1 to 16 (default 2).
- `--compressed`: compressed source mode. It is accepted but does not change
  the result.
- `--no-hfc`: switch compensation and upsampling off. The file is only
  rewritten as float WAV.
- `--seed N`: seed for the random variation, for reproducible output.

Files without an audio extension are reported and skipped. The audio
extensions are `.wav`, `.flac`, `.ogg`, `.mp3`, `.aiff`, `.aif`, `.m4a` and
`.opus`. The command prints a summary and exits with status 0 only if every
queued file was processed.

## Library use

```python
from hraudiowizard.processor import AudioProcessor

processor = AudioProcessor(seed=1)
audio = processor.process_file(
    "song.wav",
    "song_enhanced.wav",
    enable_hfc=True,
    lowpass_freq=16000,
    compressed_mode=False,
    sample_rate_multiplier=2,
    progress=lambda fraction: print(f"{fraction:.0%}"),
)
print(audio.sample_rate, audio.num_samples)
```

`process_file` returns the `AudioData` it wrote and raises `ProcessingError`
if the file cannot be loaded, processed or saved.

To process several files in a batch, use `BatchSession` from
`hraudiowizard.app` with a `Settings` value. Add files with `add_file`, or
remove them with `remove_file` and `clear_files`. Then call `process_files`,
or call `start` and then `wait` to run the batch on a background thread. The
session exposes `status_message`, `progress` and `current_file` while it runs.

The building blocks can be used on their own:

- `hraudiowizard.fft.FFT` and `hraudiowizard.stft.STFT` (with `hann_window`)
  give real-signal spectra and overlap-add analysis and synthesis.
- `hraudiowizard.resampler.resample` and `resample_channels` do
  linear-interpolation resampling.
- `hraudiowizard.audio_io.load_file` and `save_file` read and write WAV
  audio as per-channel float32 arrays. `sanitize_samples`,
  `interleave_channels` and `deinterleave_channels` are helpers for this.
- `hraudiowizard.hfc.HFCompensation` applies the compensation step to mid
  and side signals. `find_peaks`, `remove_harmonics`, `process_peaks`,
  `flatten_spectrum` and `lowpass_bin` are its parts.
- `hraudiowizard.processor.stereo_to_mid_side` and `mid_side_to_stereo`
  convert between stereo and mid/side.
- `hraudiowizard.file_browser.FileBrowser` lists the directories and
  matching audio files in a directory, and `format_size` formats a byte
  count.

## Limitations

- Only WAV files are read: 8-, 16-, 24- and 32-bit PCM, and 32- and 64-bit
  float. Other formats with an accepted extension, such as FLAC or MP3, fail
  to load.
- Output is always 32-bit float WAV, whatever the extension of the output
  path. Samples are clamped to [-1, 1], and NaN values become 0.
- Compensation needs stereo input. Mono or multichannel audio is upsampled
  and written out without compensation.
- Input must be at least 4096 samples long after upsampling.
- There is no graphical interface. `FileBrowser` and `BatchSession` hold the
  state such an interface would display, but the package draws no windows.
- A running batch cannot be cancelled.

## Tests

```
pip install ".[test]"
pytest
```