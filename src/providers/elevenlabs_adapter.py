# src/providers/elevenlabs_adapter.py — v1
"""ElevenLabs text-to-speech adapter over httpx.

Returns audio as base64 text. The API answers either with raw audio bytes
or, through some gateways, with a JSON body carrying an ``audio`` field.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time

import httpx

from agenticad.core.errors import (
    ConfigMissing,
    NonSuccessResponse,
    TransportFailure,
    UnparseableResponse,
)

logger = logging.getLogger(__name__)

MAX_SPEECH_CHARS = 1000

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.2,
    "use_speaker_boost": True,
}


class ElevenLabsAdapter:
    """Speech provider for ElevenLabs voices."""

    def __init__(
        self,
        api_key: str = "",
        base_url: str = "https://api.elevenlabs.io",
        model_id: str = "eleven_multilingual_v2",
        max_chars: int = MAX_SPEECH_CHARS,
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model_id = model_id
        self._max_chars = max_chars
        self._timeout_s = timeout_s
        self._client = client

    @property
    def name(self) -> str:
        return "elevenlabs"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._client

    async def synthesize(self, text: str, voice_id: str) -> str:
        """Synthesize ``text`` (truncated) with ``voice_id``.

        Returns:
            Base64-encoded audio.

        Raises:
            ConfigMissing: No API key; no network call was made.
            TransportFailure: Timeout or network error.
            NonSuccessResponse: Error status from the API.
            UnparseableResponse: Response carried no audio.
        """
        if not self.is_configured:
            raise ConfigMissing(self.name, "ELEVENLABS_API_KEY not set")

        url = f"{self._base_url}/v1/text-to-speech/{voice_id}"
        payload = {
            "text": text[: self._max_chars],
            "model_id": self._model_id,
            "voice_settings": VOICE_SETTINGS,
        }
        headers = {
            "xi-api-key": self._api_key,
            "Content-Type": "application/json",
            "Accept": "audio/mpeg",
        }

        t0 = time.monotonic()
        try:
            resp = await asyncio.wait_for(
                self._get_client().post(url, json=payload, headers=headers),
                timeout=self._timeout_s,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise TransportFailure(
                self.name, f"no reply within {self._timeout_s:g}s"
            ) from e
        except httpx.HTTPError as e:
            raise TransportFailure(self.name, str(e) or type(e).__name__) from e

        if resp.status_code >= 400:
            raise NonSuccessResponse(self.name, resp.status_code, resp.text[:200])

        audio = self._extract_audio(resp)
        logger.debug(
            "Synthesized %d chars in %dms",
            len(payload["text"]), int((time.monotonic() - t0) * 1000),
        )
        return audio

    def _extract_audio(self, resp: httpx.Response) -> str:
        content_type = resp.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            try:
                data = resp.json()
            except ValueError as e:
                raise UnparseableResponse(self.name, "invalid JSON body") from e
            audio = data.get("audio") if isinstance(data, dict) else None
            if not isinstance(audio, str) or not audio:
                raise UnparseableResponse(self.name, "JSON body has no audio field")
            return audio
        if not resp.content:
            raise UnparseableResponse(self.name, "empty audio body")
        return base64.b64encode(resp.content).decode("ascii")

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
