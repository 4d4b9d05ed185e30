"""Placeholder speech synthesis: a short speech-like tone rendered as WAV."""
import io
import math
import random
import struct
import wave
from typing import Dict, List, Optional

SAMPLE_RATE = 44100
DURATION_SECONDS = 3
SAMPLE_WIDTH = 2
AMPLITUDE = 0.6
NOISE = 0.025

# (multiple of the base pitch, weight)
HARMONICS = [(1, 0.3), (2, 0.2), (3, 0.15), (4, 0.1)]

VOICES: Dict[str, Dict[str, object]] = {
    "default": {"name": "Lumos", "pitch": 150.0, "description": "Balanced, friendly voice"},
    "male": {"name": "Lumos (male)", "pitch": 120.0, "description": "Lower, calm voice"},
    "female": {"name": "Lumos (female)", "pitch": 210.0, "description": "Higher, bright voice"},
    "warm": {"name": "Lumos (warm)", "pitch": 165.0, "description": "Soft voice for check-ins"},
    "professional": {"name": "Lumos (professional)", "pitch": 140.0, "description": "Even voice for lessons"},
}


def list_voices() -> List[Dict[str, object]]:
    return [{"id": voice_id, **info} for voice_id, info in VOICES.items()]


def envelope(t: float) -> float:
    return math.exp(-0.3 * t) * (1 - math.exp(-2 * t))


class TTSService:
    def __init__(self, seed: Optional[int] = None):
        self.random = random.Random(seed)

    def synthesize(self, text: str, voice: str = "default") -> bytes:
        """WAV bytes: 3 s, 44.1 kHz, mono, 16-bit PCM"""
        if not text or not text.strip():
            raise ValueError("Text is required")
        pitch = float(VOICES.get(voice, VOICES["default"])["pitch"])
        frames = bytearray()
        for i in range(SAMPLE_RATE * DURATION_SECONDS):
            t = i / SAMPLE_RATE
            sample = sum(weight * math.sin(2 * math.pi * pitch * n * t) for n, weight in HARMONICS)
            sample += (self.random.random() - 0.5) * 2 * NOISE
            sample *= envelope(t) * AMPLITUDE
            sample = max(-1.0, min(1.0, sample))
            frames += struct.pack("<h", int(math.floor(sample * 32767)))

        out = io.BytesIO()
        with wave.open(out, "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(SAMPLE_WIDTH)
            wav.setframerate(SAMPLE_RATE)
            wav.writeframes(bytes(frames))
        return out.getvalue()
