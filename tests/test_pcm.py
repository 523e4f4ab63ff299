"""Tests for PCM16 quantisation and framing."""

from __future__ import annotations

import base64

import numpy as np
import pytest

from errors import DecodeError
from pcm import decode_pcm16, downmix, encode_chunk, quantize


def test_quantize_uses_round_of_scaled_sample() -> None:
    values = quantize(np.array([0.0, 0.5, -0.5, -1.0, 0.25 / 32768]))
    assert values.tolist() == [0, 16384, -16384, -32768, 0]


def test_quantize_saturates_positive_full_scale() -> None:
    assert quantize(np.array([1.0])).tolist() == [32767]


def test_quantize_then_decode_stays_within_one_step() -> None:
    samples = np.linspace(-1.0, 1.0, 2001)
    chunk = encode_chunk(samples)
    decoded = decode_pcm16(chunk.data)[:, 0]
    assert np.max(np.abs(decoded - samples)) <= 1 / 32768


def test_encode_chunk_is_little_endian_int16() -> None:
    chunk = encode_chunk(np.array([[0.5], [-0.5]], dtype=np.float32))
    assert base64.b64decode(chunk.data) == b"\x00\x40\x00\xc0"
    assert chunk.mime_type == "audio/pcm;rate=16000"


def test_downmix_averages_channels() -> None:
    block = np.array([[1.0, 0.0], [0.5, 0.5]], dtype=np.float32)
    assert downmix(block).tolist() == [0.5, 0.5]


def test_decode_interleaved_stereo() -> None:
    raw = np.array([16384, -16384, 0, 8192], dtype="<i2").tobytes()
    frames = decode_pcm16(base64.b64encode(raw).decode(), channels=2)
    assert frames.shape == (2, 2)
    assert frames[0].tolist() == [0.5, -0.5]
    assert frames[1].tolist() == [0.0, 0.25]


def test_decode_rejects_invalid_base64() -> None:
    with pytest.raises(DecodeError):
        decode_pcm16("not base64!!")


def test_decode_rejects_odd_byte_count() -> None:
    with pytest.raises(DecodeError, match="odd"):
        decode_pcm16(base64.b64encode(b"\x00\x01\x02").decode())


def test_decode_rejects_partial_frame() -> None:
    raw = np.zeros(3, dtype="<i2").tobytes()
    with pytest.raises(DecodeError, match="channels"):
        decode_pcm16(base64.b64encode(raw).decode(), channels=2)
