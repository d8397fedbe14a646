"""
Podcast speech synthesis.

Writes a two-host dialogue from the findings with Gemini, then voices it
with Gemini multi-speaker TTS or, alternatively, ElevenLabs.
"""

import asyncio
import io
import logging
import re
import wave
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel, Field

from ..errors import MalformedUpstreamResponse, UpstreamFailure
from ..llm.cascade import ModelAttempt, ModelCascade
from ..models.search import TokenUsage


logger = logging.getLogger(__name__)


class Host(BaseModel):
    """One podcast host: the label spoken in the script and the role played."""

    label: str
    role: str
    voice: str


class DialogueRequest(BaseModel):
    """Structured input for the speech service."""

    source_text: str
    hosts: list[Host]
    word_count: int = 300
    conversation_style: list[str] = Field(default_factory=lambda: ["engaging", "informative", "current"])
    dialogue_structure: list[str] = Field(default_factory=list)
    podcast_name: str = "Zero Noise Intelligence Brief"
    podcast_tagline: str = "Latest intelligence and developments"
    creativity: float = Field(default=0.7, ge=0.0, le=1.0)
    user_instructions: str = ""


class SpeechResult(BaseModel):
    """Synthesized audio plus the dialogue that was spoken."""

    audio: bytes
    mime_type: str
    transcript: str
    script_model: str
    token_usage: Optional[TokenUsage] = None


class GeminiPodcastSynthesizer:
    """
    Dialogue writer + Gemini multi-speaker TTS.

    The dialogue is written through a model cascade; a reply with no
    speaker lines counts as a failed attempt.
    """

    PROVIDER = "gemini"

    # Gemini TTS returns L16 PCM, 24kHz mono
    SAMPLE_RATE = 24000

    # Voices for the first and second host
    DEFAULT_VOICES = ("Kore", "Charon")

    DIALOGUE_PROMPT = """Write the script for a two-host podcast episode of "{podcast_name}" ({podcast_tagline}).

HOSTS:
{hosts}

SOURCE INTELLIGENCE:
{source}

STRUCTURE (in this order): {structure}
STYLE: {style}
LENGTH: about {words} words in total.
{instructions}
FORMAT RULES:
- Every line starts with the speaker label followed by a colon, e.g. "{first_label}: ..."
- Use only these labels: {labels}
- No stage directions, headings, or markdown"""

    def __init__(
        self,
        api_key: Optional[str],
        script_cascade: Optional[ModelCascade] = None,
        tts_model: str = "gemini-2.5-flash-preview-tts",
        voices: Optional[tuple[str, str]] = None,
    ):
        self.api_key = api_key
        self.voices = voices or self.DEFAULT_VOICES
        self.script_cascade = script_cascade or ModelCascade.two_tier(
            ModelAttempt(model="gemini-2.5-flash"),
            ModelAttempt(model="gemini-2.0-flash"),
        )
        self.tts_model = tts_model
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        """Lazy load the Gemini client."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("GOOGLE_API_KEY or GEMINI_API_KEY not set")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def missing_credentials(self) -> list[str]:
        """Env vars this provider needs but does not have."""
        return [] if self.api_key else ["GEMINI_API_KEY"]

    async def synthesize(self, request: DialogueRequest) -> SpeechResult:
        script, script_model, script_usage = await self.write_dialogue(request)
        logger.info(f"Dialogue written with {script_model} ({len(script.split())} words)")

        audio, mime_type, speech_usage = await self.speak(script, request.hosts)
        return SpeechResult(
            audio=audio,
            mime_type=mime_type,
            transcript=script,
            script_model=script_model,
            token_usage=combine_usage(script_usage, speech_usage),
        )

    async def _generate(self, service: str, **kwargs):
        """One Gemini call; API and transport errors become UpstreamFailure."""
        try:
            return await self.client.aio.models.generate_content(**kwargs)
        except genai_errors.APIError as e:
            raise UpstreamFailure(f"{service} request failed: {e}", service=service, status=e.code) from e
        except (httpx.HTTPError, asyncio.TimeoutError) as e:
            raise UpstreamFailure(f"{service} transport error: {e!r}", service=service) from e

    async def write_dialogue(self, request: DialogueRequest) -> tuple[str, str, Optional[TokenUsage]]:
        prompt = self.DIALOGUE_PROMPT.format(
            podcast_name=request.podcast_name,
            podcast_tagline=request.podcast_tagline,
            hosts="\n".join(f"- {h.label}: {h.role}" for h in request.hosts),
            source=request.source_text,
            structure=" -> ".join(request.dialogue_structure),
            style=", ".join(request.conversation_style),
            words=request.word_count,
            instructions=f"EXTRA INSTRUCTIONS: {request.user_instructions}\n" if request.user_instructions else "",
            first_label=request.hosts[0].label,
            labels=", ".join(h.label for h in request.hosts),
        )
        labels = [h.label for h in request.hosts]

        async def call(attempt: ModelAttempt) -> tuple[str, str, Optional[TokenUsage]]:
            response = await self._generate(
                "gemini",
                model=attempt.model,
                contents=prompt,
                config=types.GenerateContentConfig(temperature=request.creativity),
            )

            script = normalize_dialogue(response.text or "", labels)
            if not script:
                raise MalformedUpstreamResponse(
                    f"{attempt.model} returned no usable dialogue lines", service="gemini"
                )
            return script, attempt.model, usage_from_metadata(response)

        return await self.script_cascade.run(call)

    async def speak(self, script: str, hosts: list[Host]) -> tuple[bytes, str, Optional[TokenUsage]]:
        """Voice the whole dialogue in one multi-speaker request."""
        labels = " and ".join(h.label for h in hosts)
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                multi_speaker_voice_config=types.MultiSpeakerVoiceConfig(
                    speaker_voice_configs=[
                        types.SpeakerVoiceConfig(
                            speaker=host.label,
                            voice_config=types.VoiceConfig(
                                prebuilt_voice_config=types.PrebuiltVoiceConfig(
                                    voice_name=host.voice,
                                ),
                            ),
                        )
                        for host in hosts
                    ]
                )
            ),
        )

        response = await self._generate(
            "gemini-tts",
            model=self.tts_model,
            contents=f"TTS the following podcast conversation between {labels}:\n\n{script}",
            config=config,
        )

        pcm = extract_inline_audio(response)
        if not pcm:
            raise MalformedUpstreamResponse("Speech service returned no audio data", service="gemini-tts")
        return pcm_to_wav(pcm, self.SAMPLE_RATE), "audio/wav", usage_from_metadata(response)


class ElevenLabsPodcastSynthesizer(GeminiPodcastSynthesizer):
    """Gemini-written dialogue voiced line by line with ElevenLabs."""

    PROVIDER = "elevenlabs"
    BASE_URL = "https://api.elevenlabs.io/v1"

    # Adam and Bella
    DEFAULT_VOICES = ("pNInz6obpgDQGcFmaJgB", "EXAVITQu4vr4xnSDxMaL")

    def __init__(
        self,
        api_key: Optional[str],
        elevenlabs_api_key: Optional[str],
        script_cascade: Optional[ModelCascade] = None,
        voices: Optional[tuple[str, str]] = None,
        model_id: str = "eleven_multilingual_v2",
        parallel_requests: int = 3,
    ):
        super().__init__(api_key, script_cascade=script_cascade, voices=voices)
        self.elevenlabs_api_key = elevenlabs_api_key
        self.model_id = model_id
        self.parallel_requests = parallel_requests

    def missing_credentials(self) -> list[str]:
        missing = super().missing_credentials()
        if not self.elevenlabs_api_key:
            missing.append("ELEVENLABS_API_KEY")
        return missing

    async def speak(self, script: str, hosts: list[Host]) -> tuple[bytes, str, Optional[TokenUsage]]:
        voices = {h.label: h.voice for h in hosts}
        lines = [split_dialogue_line(line) for line in script.splitlines()]
        lines = [(speaker, text) for speaker, text in lines if speaker in voices and text]

        semaphore = asyncio.Semaphore(self.parallel_requests)

        async def speak_line(speaker: str, text: str) -> bytes:
            async with semaphore:
                return await self._generate_speech(text, voices[speaker])

        chunks = await asyncio.gather(*(speak_line(s, t) for s, t in lines))
        # MP3 frames concatenate cleanly; ElevenLabs bills characters, not tokens
        return b"".join(chunks), "audio/mpeg", None

    async def _generate_speech(self, text: str, voice_id: str) -> bytes:
        url = f"{self.BASE_URL}/text-to-speech/{voice_id}"
        headers = {
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": self.elevenlabs_api_key,
        }
        payload = {
            "text": text,
            "model_id": self.model_id,
            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
        }

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(url, json=payload, headers=headers, timeout=60.0)
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"ElevenLabs request failed: {e}", service="elevenlabs") from e

        if response.status_code != 200:
            logger.error(f"TTS request failed: {response.status_code} - {response.text[:300]}")
            raise UpstreamFailure(
                f"ElevenLabs returned {response.status_code}",
                service="elevenlabs",
                status=response.status_code,
            )
        return response.content


_LINE = re.compile(r"^\s*\**\s*([A-Za-z][\w .'-]*?)\s*\**\s*:\s*\**\s*(.*)$")


def split_dialogue_line(line: str) -> tuple[Optional[str], str]:
    """Split 'Label: text' (tolerating markdown bold) into its parts."""
    match = _LINE.match(line)
    if not match:
        return None, line.strip()
    return match.group(1).strip(), match.group(2).strip()


def normalize_dialogue(text: str, labels: list[str]) -> str:
    """Keep only lines spoken by a known host, as 'Label: text'."""
    known = {label.lower(): label for label in labels}
    lines = []
    for raw in text.splitlines():
        speaker, spoken = split_dialogue_line(raw)
        if speaker and speaker.lower() in known and spoken:
            lines.append(f"{known[speaker.lower()]}: {spoken}")
    return "\n".join(lines)


def extract_inline_audio(response) -> Optional[bytes]:
    """First inline audio payload in a Gemini response, if any."""
    for candidate in response.candidates or []:
        content = candidate.content
        for part in (content.parts if content and content.parts else []):
            if part.inline_data and (part.inline_data.mime_type or "").startswith("audio"):
                return part.inline_data.data
    return None


def pcm_to_wav(pcm: bytes, sample_rate: int = 24000) -> bytes:
    """Wrap raw 16-bit mono PCM in a WAV container."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def usage_from_metadata(response) -> Optional[TokenUsage]:
    """Token counts from a Gemini response's usage_metadata, if reported."""
    metadata = getattr(response, "usage_metadata", None)
    if metadata is None:
        return None
    prompt = metadata.prompt_token_count or 0
    completion = metadata.candidates_token_count or 0
    return TokenUsage(
        prompt_tokens=prompt,
        completion_tokens=completion,
        total_tokens=metadata.total_token_count or (prompt + completion),
    )


def combine_usage(*usages: Optional[TokenUsage]) -> Optional[TokenUsage]:
    reported = [u for u in usages if u is not None]
    if not reported:
        return None
    total = reported[0]
    for usage in reported[1:]:
        total = total + usage
    return total
