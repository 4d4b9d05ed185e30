"""Speech-to-text through the HuggingFace Whisper inference endpoint."""
import logging
import random
from typing import List, Optional

import httpx

from lumos.config import settings

logger = logging.getLogger(__name__)

MAX_CHUNKS = 50
MAX_BUFFER_BYTES = 10 * 1024 * 1024
MAX_UPLOAD_BYTES = 5 * 1024 * 1024

# Spoken-style phrases used when the transcription service is unavailable
FALLBACK_PHRASES = [
    "Hi, I am Jack",
    "Hello, how are you?",
    "I am feeling stressed about my exams",
    "Can you help me with my studies?",
    "I feel lonely at university",
    "I am worried about my future career",
    "I am happy today because I did well in my assignment",
    "Hi, my name is Jack",
    "Hello Lumos, how are you?",
    "I need someone to talk to",
    "I'm feeling overwhelmed with my coursework",
    "Can you give me some advice?",
    "I'm having trouble making friends",
    "I'm worried about my grades",
    "I feel like I'm not good enough",
]


class AudioBuffer:
    """Bounded list of audio chunks for one connection"""

    def __init__(self, max_chunks: int = MAX_CHUNKS, max_bytes: int = MAX_BUFFER_BYTES):
        self.max_chunks = max_chunks
        self.max_bytes = max_bytes
        self.chunks: List[bytes] = []

    @property
    def size(self) -> int:
        return sum(len(c) for c in self.chunks)

    def add_chunk(self, chunk: bytes):
        if not chunk:
            return
        if len(self.chunks) >= self.max_chunks:
            self.chunks.pop(0)
        if self.size + len(chunk) > self.max_bytes:
            logger.warning("Audio buffer over size limit, clearing")
            self.chunks = []
        self.chunks.append(chunk)

    def drain(self, max_bytes: int = MAX_UPLOAD_BYTES) -> bytes:
        """Concatenate and clear; the result is cut to max_bytes"""
        audio = b"".join(self.chunks)
        self.chunks = []
        if len(audio) > max_bytes:
            logger.warning(f"Audio payload {len(audio)} bytes, truncating to {max_bytes}")
            audio = audio[:max_bytes]
        return audio

    def clear(self):
        self.chunks = []

    def __len__(self):
        return len(self.chunks)


def fallback_phrase() -> str:
    return random.choice(FALLBACK_PHRASES)


class STTService:
    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.huggingface_api_key
        self.url = url or settings.whisper_url
        self.timeout = timeout or settings.stt_timeout_seconds
        self.transport = transport
        self.buffer = AudioBuffer()

    def add_chunk(self, chunk: bytes):
        self.buffer.add_chunk(chunk)

    def clear_buffer(self):
        self.buffer.clear()

    async def transcribe(self) -> str:
        """Transcribe and clear the buffered audio. Empty buffer gives ""."""
        if not len(self.buffer):
            return ""
        audio = self.buffer.drain()
        if not audio:
            return ""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "audio/webm",
            "x-wait-for-model": "true",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, content=audio, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Whisper request timed out after {self.timeout}s")
            return fallback_phrase()
        except httpx.HTTPError as e:
            logger.error(f"Whisper request failed: {e}")
            return fallback_phrase()

        if response.status_code == 401:
            logger.error("Whisper rejected the HuggingFace API key")
            return fallback_phrase()
        if response.status_code == 413:
            logger.error("Audio payload too large for Whisper")
            return fallback_phrase()
        if response.status_code == 503:
            logger.warning("Whisper model is loading")
            return fallback_phrase()
        if response.status_code != 200:
            logger.error(f"Whisper error {response.status_code}: {response.text[:200]}")
            return fallback_phrase()

        try:
            data = response.json()
        except ValueError:
            logger.error("Whisper returned a body that is not JSON")
            return fallback_phrase()
        if isinstance(data, dict) and data.get("error"):
            logger.error(f"Whisper error: {data['error']}")
            return fallback_phrase()
        text = data.get("text") if isinstance(data, dict) else None
        return text.strip() if isinstance(text, str) else ""
