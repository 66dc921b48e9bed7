"""TTS Service - narration synthesis via Edge TTS or ElevenLabs."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

import edge_tts
import httpx

from utils.errors import ExternalToolError, MissingPreconditionError

logger = logging.getLogger(__name__)

ELEVENLABS_API_BASE = "https://api.elevenlabs.io/v1"
ELEVENLABS_OUTPUT_FORMAT = "mp3_44100_128"

# Energetic delivery for short vertical videos
ELEVENLABS_VOICE_SETTINGS = {
    "stability": 0.4,
    "similarity_boost": 0.8,
    "style": 0.7,
    "use_speaker_boost": True,
}


class TTSServiceError(ExternalToolError):
    """Error from a TTS provider."""

    pass


class SpeechProvider(ABC):
    """Abstract base class for text-to-speech backends."""

    @abstractmethod
    async def synthesize(self, text: str) -> bytes:
        """Convert text to encoded audio.

        Args:
            text: Narration text

        Returns:
            Audio bytes (MP3)

        Raises:
            TTSServiceError: If synthesis fails
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Get the name of this provider (e.g., "edge", "elevenlabs")."""

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""


class EdgeTTSProvider(SpeechProvider):
    """Microsoft Edge online TTS (no API key required)."""

    def __init__(self, voice: str = "ru-RU-DmitryNeural"):
        self.voice = voice

    def get_provider_name(self) -> str:
        return "edge"

    async def synthesize(self, text: str) -> bytes:
        communicate = edge_tts.Communicate(text, self.voice)
        chunks: list[bytes] = []
        try:
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    chunks.append(chunk["data"])
        except Exception as e:
            raise TTSServiceError(f"Edge TTS failed (voice {self.voice}): {e}") from e
        return b"".join(chunks)


class ElevenLabsProvider(SpeechProvider):
    """ElevenLabs text-to-speech REST API."""

    def __init__(
        self,
        api_key: str,
        voice_id: str,
        model_id: str = "eleven_turbo_v2_5",
        client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise MissingPreconditionError("ELEVENLABS_API_KEY is not set")
        self.api_key = api_key
        self.voice_id = voice_id
        self.model_id = model_id
        self.client = client or httpx.AsyncClient(timeout=120.0)

    def get_provider_name(self) -> str:
        return "elevenlabs"

    async def synthesize(self, text: str) -> bytes:
        url = f"{ELEVENLABS_API_BASE}/text-to-speech/{self.voice_id}"
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": ELEVENLABS_VOICE_SETTINGS,
        }
        headers = {
            "xi-api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

        try:
            response = await self.client.post(
                url,
                params={"output_format": ELEVENLABS_OUTPUT_FORMAT},
                headers=headers,
                json=payload,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TTSServiceError(
                f"ElevenLabs returned {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise TTSServiceError(f"ElevenLabs request failed: {e}") from e

        return response.content

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


def create_speech_provider(config: dict) -> SpeechProvider:
    """Select the TTS backend once, from the ``tts_engine`` setting.

    Raises:
        MissingPreconditionError: If the engine is unknown or lacks credentials
    """
    engine = config.get("tts_engine", "edge")

    if engine == "edge":
        return EdgeTTSProvider(voice=config.get("tts_voice", "ru-RU-DmitryNeural"))

    if engine == "elevenlabs":
        return ElevenLabsProvider(
            api_key=config.get("elevenlabs_api_key") or "",
            voice_id=config["elevenlabs_voice_id"],
            model_id=config.get("elevenlabs_model", "eleven_turbo_v2_5"),
        )

    raise MissingPreconditionError(f"Unknown TTS engine: {engine!r} (use 'edge' or 'elevenlabs')")


class TTSService:
    """Writes narration audio files using the configured provider."""

    def __init__(self, provider: SpeechProvider):
        self.provider = provider

    @staticmethod
    def detect_audio_format(audio_bytes: bytes) -> str:
        """Detect audio format from magic bytes."""
        if len(audio_bytes) >= 12 and audio_bytes[:4] == b"RIFF" and audio_bytes[8:12] == b"WAVE":
            return "wav"
        if audio_bytes[:3] == b"ID3" or (
            len(audio_bytes) >= 2
            and audio_bytes[0] == 0xFF
            and (audio_bytes[1] & 0xE0) == 0xE0
        ):
            return "mp3"
        if audio_bytes[:4] == b"OggS":
            return "ogg"
        return "bin"

    async def synthesize(self, text: str, output_path: Path) -> None:
        """Synthesize ``text`` into ``output_path``.

        Raises:
            TTSServiceError: If the provider fails or returns no audio
        """
        logger.info(f"Generating narration ({self.provider.get_provider_name()}): {text[:50]}...")

        audio_bytes = await self.provider.synthesize(text)
        if not audio_bytes:
            raise TTSServiceError(
                f"{self.provider.get_provider_name()} returned empty audio"
            )

        audio_format = self.detect_audio_format(audio_bytes)
        if audio_format != "mp3":
            logger.warning(f"Provider returned {audio_format} audio, saving as {output_path.name}")

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(audio_bytes)

        logger.info(f"Audio saved: {output_path} ({len(audio_bytes)} bytes)")

    async def close(self) -> None:
        await self.provider.close()
