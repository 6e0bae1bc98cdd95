import numpy as np
import pytest
import soundfile as sf


@pytest.fixture
def write_wav(tmp_path):
    """Factory writing an integer array to a WAV file under tmp_path."""
    def _write(data, samplerate=8000, subtype="PCM_16", name="input.wav"):
        path = tmp_path / name
        sf.write(str(path), np.asarray(data), samplerate, subtype=subtype)
        return str(path)
    return _write


@pytest.fixture
def sine_16bit():
    """Half a second of a 440 Hz sine at 8 kHz, 16-bit range."""
    t = np.arange(4000) / 8000
    return (np.sin(2 * np.pi * 440 * t) * 20000).astype(np.int16)
