"""Podcast dialogue writing and speech synthesis."""

from .speech_synthesizer import (
    DialogueRequest,
    ElevenLabsPodcastSynthesizer,
    GeminiPodcastSynthesizer,
    Host,
    SpeechResult,
    normalize_dialogue,
    pcm_to_wav,
)

__all__ = [
    "DialogueRequest",
    "Host",
    "SpeechResult",
    "GeminiPodcastSynthesizer",
    "ElevenLabsPodcastSynthesizer",
    "normalize_dialogue",
    "pcm_to_wav",
]
