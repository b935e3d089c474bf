"""Configuration model for characters, generation settings and results.

These records describe everything the prompt compiler consumes.  They are
Pydantic models so that the same types validate API payloads, serialise into
the history and session slots, and deep-copy cleanly for snapshots.

Models
------
Prop
    An object held by or placed near a character.
DistinguishingMark
    A tattoo, scar, piercing or similar identifying feature.
CharacterConfig
    One depicted person: reference images, text descriptors, presets and
    body attributes.
GenerationSettings
    Settings shared by all characters for one request.
GeneratedImage
    Immutable record of one completed generation, including deep snapshots
    of the configuration that produced it.
"""

from __future__ import annotations

import time
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Enumerated attribute values.
# ---------------------------------------------------------------------------

BodySize = Literal["extra-small", "small", "medium", "large", "extra-large"]
ExpressionPreset = Literal["default", "smiling", "angry", "seductive", "custom"]
HairstyleOption = Literal["default", "custom-text", "custom-image"]
PosePreset = Literal[
    "none",
    "standing",
    "sitting",
    "lying-down",
    "kneeling",
    "crawling",
    "squatting",
    "leaning",
    "arched-back",
    "on-all-fours",
    "side-lying",
    "bent-over",
    "looking-back",
    "hands-and-knees",
    "custom",
]
MarkType = Literal["tattoo", "birthmark", "scar", "piercing", "other"]
ModelChoice = Literal["high-quality", "fast"]
AspectRatio = Literal[
    "auto",
    "1:1",
    "4:3",
    "3:4",
    "16:9",
    "9:16",
    "3:2",
    "2:3",
    "21:9",
    "4:5",
    "5:4",
    "7:5",
    "5:7",
    "custom",
]
CameraAngle = Literal[
    "auto",
    "front",
    "side",
    "back",
    "over-shoulder",
    "behind-close",
    "low-angle",
    "high-angle",
    "top-down",
    "dutch-angle",
    "custom",
]
LightingOption = Literal[
    "auto",
    "natural",
    "studio",
    "golden-hour",
    "dramatic",
    "neon",
    "soft",
    "backlit",
    "candlelight",
    "moody",
]
DetailLevel = Literal["auto", "ultra", "high", "medium", "low"]

# Bounds for the numeric sliders.  Out-of-range values are clamped, not rejected.
SKIN_TONE_MIN = 0
SKIN_TONE_MAX = 10
HEIGHT_MIN_INCHES = 48
HEIGHT_MAX_INCHES = 78
MAX_ADDITIONAL_FACE_IMAGES = 4


def _new_id() -> str:
    return str(uuid.uuid4())


class Prop(BaseModel):
    """An object associated with a character.

    Attributes:
        id: Unique identifier within the character.
        name: What the prop is.  Props with an empty name are not described
            in the prompt, although their image is still attached.
        image_data: Optional reference image payload (usually a data URL).
        placement: Where the prop sits relative to the character.
    """

    id: str = Field(default_factory=_new_id)
    name: str = ""
    image_data: str | None = None
    placement: str = ""


class DistinguishingMark(BaseModel):
    """A tattoo, birthmark, scar, piercing or other identifying mark."""

    id: str = Field(default_factory=_new_id)
    type: MarkType = "other"
    description: str = ""
    image_data: str | None = None


class CharacterConfig(BaseModel):
    """One depicted person.

    Image fields hold opaque payloads (typically ``data:`` URLs) or ``None``.
    Text fields default to the empty string, which is treated as "not set"
    by the prompt compiler.

    ``skin_tone`` and ``height_inches`` are clamped into their valid ranges
    on validation, so a merge-update with an out-of-range slider value never
    fails.
    """

    id: str = Field(default_factory=_new_id)
    label: str = ""

    # Reference assets
    face_image: str | None = None
    additional_face_images: list[str] = Field(
        default_factory=list,
        max_length=MAX_ADDITIONAL_FACE_IMAGES,
    )
    side_profile_image: str | None = None
    clothing_image: str | None = None
    pose_reference_image: str | None = None
    hairstyle_image: str | None = None
    hair_color_reference_image: str | None = None
    eye_color_reference_image: str | None = None

    # Textual descriptors
    clothing_text: str = ""
    hairstyle_text: str = ""
    custom_expression: str = ""
    action_prompt: str = ""

    # Presets
    hairstyle_option: HairstyleOption = "default"
    chest_size: BodySize = "medium"
    butt_size: BodySize = "medium"
    stomach_size: BodySize = "medium"
    expression_preset: ExpressionPreset = "default"
    pose_preset: PosePreset = "none"

    # Numeric and derived attributes
    skin_tone: int = 5
    skin_color: str | None = None
    hair_color: str | None = None
    eye_color: str | None = None
    preserve_exact_head: bool = False
    height_enabled: bool = False
    height_inches: int = 66

    # Collections
    props: list[Prop] = Field(default_factory=list)
    marks: list[DistinguishingMark] = Field(default_factory=list)

    @field_validator("skin_tone")
    @classmethod
    def _clamp_skin_tone(cls, value: int) -> int:
        return max(SKIN_TONE_MIN, min(SKIN_TONE_MAX, value))

    @field_validator("height_inches")
    @classmethod
    def _clamp_height(cls, value: int) -> int:
        return max(HEIGHT_MIN_INCHES, min(HEIGHT_MAX_INCHES, value))


def create_default_character(index: int, character_id: str | None = None) -> CharacterConfig:
    """Create a character with every attribute at its default.

    Args:
        index: Zero-based position of the character in the session; used
            for the ``"Person N"`` label.
        character_id: Optional explicit identifier.  A UUID is generated
            when omitted.

    Returns:
        A new :class:`CharacterConfig`.
    """
    return CharacterConfig(
        id=character_id or _new_id(),
        label=f"Person {index + 1}",
    )


class GenerationSettings(BaseModel):
    """Settings shared by every character of one generation request.

    ``custom_aspect_ratio`` and ``custom_camera_angle`` are only consulted
    when the corresponding enum is ``"custom"``.
    """

    model: ModelChoice = "high-quality"
    aspect_ratio: AspectRatio = "auto"
    custom_aspect_ratio: str = ""
    camera_angle: CameraAngle = "auto"
    custom_camera_angle: str = ""
    lighting: LightingOption = "auto"
    skin_detail: DetailLevel = "auto"
    eye_detail: DetailLevel = "auto"
    background_image: str | None = None
    background_text: str = ""
    confine_to_background: bool = False
    image_count: int = Field(default=1, ge=1)


class GeneratedImage(BaseModel):
    """Immutable record of one completed generation.

    Attributes:
        id: UUID of the entry.
        image_data: URL or data URL of the generated image.
        prompt: The exact prompt string sent to the service.
        characters: Deep snapshot of the characters used.
        settings: Deep snapshot of the settings used.
        timestamp: Creation time in epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    image_data: str
    prompt: str
    characters: list[CharacterConfig]
    settings: GenerationSettings
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))

    @classmethod
    def create(
        cls,
        image_data: str,
        prompt: str,
        characters: list[CharacterConfig],
        settings: GenerationSettings,
    ) -> GeneratedImage:
        """Build a history entry holding independent copies of the configuration.

        Later edits to the live characters or settings never reach the
        returned record.
        """
        return cls(
            image_data=image_data,
            prompt=prompt,
            characters=[character.model_copy(deep=True) for character in characters],
            settings=settings.model_copy(deep=True),
        )
