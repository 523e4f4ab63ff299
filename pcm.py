"""PCM16 quantisation and base64 framing for the live audio wire."""

from __future__ import annotations

import base64
import binascii

import numpy as np

from errors import DecodeError
from models import AudioChunk

INPUT_SAMPLE_RATE = 16000
OUTPUT_SAMPLE_RATE = 24000
PCM_SCALE = 32768.0
INPUT_MIME_TYPE = f"audio/pcm;rate={INPUT_SAMPLE_RATE}"

_INT16_LE = np.dtype("<i2")


def downmix(block: np.ndarray) -> np.ndarray:
    """Average a (frames, channels) block down to mono."""
    samples = np.asarray(block, dtype=np.float32)
    if samples.ndim == 2:
        if samples.shape[1] == 1:
            return samples[:, 0]
        return samples.mean(axis=1)
    return samples.reshape(-1)


def quantize(samples: np.ndarray) -> np.ndarray:
    """Map floats in [-1, 1] to int16 via round(s * 32768).

    +1.0 saturates to 32767. Inputs outside [-1, 1] are not corrected.
    """
    scaled = np.round(np.asarray(samples, dtype=np.float64) * PCM_SCALE)
    return np.clip(scaled, -32768, 32767).astype(_INT16_LE)


def encode_chunk(block: np.ndarray, mime_type: str = INPUT_MIME_TYPE) -> AudioChunk:
    pcm = quantize(downmix(block)).tobytes()
    return AudioChunk(data=base64.b64encode(pcm).decode("ascii"), mime_type=mime_type)


def decode_pcm16(data: str, channels: int = 1) -> np.ndarray:
    """Decode base64 PCM16LE into float32 frames of shape (frames, channels)."""
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise DecodeError(f"invalid base64 audio: {exc}") from exc
    if len(raw) % 2:
        raise DecodeError(f"odd PCM16 byte length {len(raw)}")
    ints = np.frombuffer(raw, dtype=_INT16_LE)
    if ints.size % channels:
        raise DecodeError(f"{ints.size} samples do not split into {channels} channels")
    return (ints.astype(np.float32) / PCM_SCALE).reshape(-1, channels)
