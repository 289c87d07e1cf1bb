"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Domain(StrEnum):
    """Closed set of model categories."""

    LLM = "LLM"
    VLM = "VLM"
    VISION = "Vision"
    IMAGE_GEN = "ImageGen"
    VIDEO_GEN = "VideoGen"
    AUDIO = "Audio"
    ASR = "ASR"
    TTS = "TTS"
    THREE_D = "3D"
    WORLD_SIM = "World/Sim"
    LORA = "LoRA"
    FINE_TUNE = "FineTune"
    BACKGROUND_REMOVAL = "BackgroundRemoval"
    UPSCALER = "Upscaler"
    OTHER = "Other"


class LicenseType(StrEnum):
    OSI = "OSI"
    COPYLEFT = "Copyleft"
    PROPRIETARY = "Proprietary"
    NON_COMMERCIAL = "Non-Commercial"
    CUSTOM = "Custom"


class Tag(StrEnum):
    """Tags the pipeline itself writes onto records."""

    NSFW = "nsfw"
    TRANSLATED = "translated"
    UNRELEASED = "unreleased"
    FUTURE_RELEASE = "future-release"
    LOCAL = "local"
