from __future__ import annotations

import os

import numpy as np
import soundfile as sf

from .models import DecodedAudio

AUDIO_EXTENSIONS = (".wav", ".aif", ".aiff")

# containers that store uncompressed PCM
_PCM_FORMATS = {"WAV", "WAVEX", "AIFF"}


class AudioFormatError(ValueError):
    """Raised for audio that is not linear integer PCM."""
    pass


# subtype -> native bits per sample
_PCM_BITS = {
    'PCM_U8': 8,
    'PCM_S8': 8,
    'PCM_16': 16,
    'PCM_24': 24,
    'PCM_32': 32,
}


def format_duration(samples: int, samplerate: int) -> str:
    if samplerate <= 0:
        return "00:00.000"
    seconds = samples / samplerate
    m = int(seconds // 60)
    s = int(seconds % 60)
    ms = int((seconds % 1) * 1000)
    return f"{m:02d}:{s:02d}.{ms:03d}"


def check_container(fmt: str) -> None:
    """Reject containers whose PCM subtype comes from a codec (FLAC, OGG, ...)."""
    if fmt not in _PCM_FORMATS:
        raise AudioFormatError(
            f"Unsupported container {fmt!r}: only uncompressed WAV/AIFF is supported"
        )


def pcm_bits(subtype: str) -> int:
    """Bits per sample for a linear PCM subtype."""
    bits = _PCM_BITS.get(subtype)
    if bits is None:
        raise AudioFormatError(
            f"Unsupported sample format {subtype!r}: only linear integer PCM is supported"
        )
    return bits


def load_pcm(filepath: str) -> DecodedAudio:
    """Read a PCM file into a single linear int32 sample sequence.

    Samples keep the file's native integer range (e.g. +/-32768 for
    16-bit).  Multi-channel frames stay interleaved.
    """
    info = sf.info(filepath)
    check_container(info.format)
    bits = pcm_bits(info.subtype)

    # soundfile returns int32 left-justified; shift back to native range
    data, samplerate = sf.read(filepath, dtype='int32', always_2d=True)
    samples = np.ascontiguousarray(data).reshape(-1)
    if bits < 32:
        samples = np.right_shift(samples, 32 - bits)

    return DecodedAudio(
        source_file=filepath,
        samples=samples.astype(np.int32, copy=False),
        sample_rate=int(samplerate),
        bit_depth=bits,
        channels=int(info.channels),
        subtype=info.subtype,
    )


def is_audio_file(filename: str) -> bool:
    return os.path.splitext(filename)[1].lower() in AUDIO_EXTENSIONS
