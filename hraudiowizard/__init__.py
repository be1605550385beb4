"""High-frequency compensation for band-limited stereo WAV audio, with a batch command."""

__version__ = "1.0.0"