"""Prompt compilation for multi-character photo generation.

The prompt is assembled from fixed sentences and lookup-table phrases, each
emitted only when the configuration asks for it.  Absent or empty fields are
omitted; nothing in this module raises because data is missing.

Prompt Structure
----------------
::

    [Fixed: quality lead sentence]

    [Aspect ratio]            (omitted when auto)

    [Camera angle]            (omitted when auto)

    [Lighting]                (omitted when auto)

    [Skin detail]             (omitted when auto)

    [Eye detail]              (omitted when auto)

    [Background image / text] (each omitted when unset)

    [Person 1]: face. hairstyle. clothing. body. skin tone. expression.
        pose. action. pose reference. props.

    [Person 2]: ...

Top-level sections are separated by double newlines; the sentences of one
character are joined with single spaces.  The order above is stable for
identical input and downstream consumers rely on it.

Usage
-----
::

    prompt = build_prompt(session.characters, session.settings)
"""

from __future__ import annotations

from collections.abc import Sequence

from photostudio.core.models import CharacterConfig, GenerationSettings, Prop

# ---------------------------------------------------------------------------
# Fixed sentences.
# ---------------------------------------------------------------------------

LEAD_SENTENCE = (
    "Generate a 4K ultra HD realistic photograph with perfect attention to lighting, "
    "skin detail, and natural appearance."
)

BACKGROUND_IMAGE_SENTENCE = "Use the provided background image as the scene background."

CONFINE_BACKGROUND_SENTENCE = (
    "Keep every person inside this exact scene; do not extend, alter, or replace the background."
)

EXACT_HEAD_SENTENCE = (
    "CRITICAL: Perfectly replicate this person's EXACT head, face, hair, and all facial "
    "features from the provided face reference image with ZERO modifications. The head must "
    "be an identical copy: same face shape, jawline, hairline, hair color, hair length, "
    "hairstyle, eyebrows, eyes, nose, mouth, ears, skin texture, and every detail. Do NOT "
    "alter, stylize, or reinterpret any part of the head. Generate a full body below the head."
)

FACE_REFERENCE_SENTENCE = (
    "Use the provided face reference image to recreate this person's exact facial features, "
    "skin tone, and details."
)

DEFAULT_HAIRSTYLE_SENTENCE = "Keep the exact hairstyle from the face reference image."
HAIRSTYLE_IMAGE_SENTENCE = "Use the provided hairstyle reference image."
CLOTHING_IMAGE_SENTENCE = (
    "Dress this person in the exact clothing shown in the provided clothing reference image."
)
DEFAULT_EXPRESSION_SENTENCE = "Keep the natural expression from the face reference."
POSE_REFERENCE_SENTENCE = "Match the body pose from the provided pose reference image."
PROP_IMAGE_SENTENCE = "Use the provided prop reference image."

# ---------------------------------------------------------------------------
# Lookup tables.  Values missing from a table fall back to the raw option.
# ---------------------------------------------------------------------------

CAMERA_ANGLE_PHRASES: dict[str, str] = {
    "front": "front view",
    "side": "side view",
    "back": "from behind",
    "over-shoulder": "over the shoulder view from behind",
    "behind-close": "close-up from behind",
    "low-angle": "low angle looking up",
    "high-angle": "high angle looking down",
    "top-down": "top-down bird's eye view",
    "dutch-angle": "dutch angle tilted view",
}

LIGHTING_PHRASES: dict[str, str] = {
    "natural": "natural daylight",
    "studio": "professional studio lighting with soft boxes",
    "golden-hour": "warm golden hour sunlight",
    "dramatic": "dramatic high-contrast lighting with deep shadows",
    "neon": "colorful neon lighting",
    "soft": "soft diffused lighting",
    "backlit": "backlit with rim light creating a glowing outline",
    "candlelight": "warm candlelight ambiance",
    "moody": "moody low-key atmospheric lighting",
}

SKIN_DETAIL_PHRASES: dict[str, str] = {
    "ultra": (
        "Ultra-realistic skin with visible pores, micro-textures, fine hair, "
        "and natural skin imperfections"
    ),
    "high": "Highly detailed skin with natural texture and subtle imperfections",
    "medium": "Standard realistic skin detail",
    "low": "Smooth, simplified skin rendering",
}

EYE_DETAIL_PHRASES: dict[str, str] = {
    "ultra": (
        "Ultra-detailed eyes with visible iris patterns, reflections, catch lights, "
        "and micro-detail in the pupils"
    ),
    "high": "Highly detailed eyes with clear iris detail and natural reflections",
    "medium": "Standard realistic eye detail",
    "low": "Simplified eye rendering",
}

POSE_PHRASES: dict[str, str] = {
    "standing": "standing upright",
    "sitting": "sitting down",
    "lying-down": "lying down",
    "kneeling": "kneeling",
    "crawling": "crawling on the ground",
    "squatting": "squatting down",
    "leaning": "leaning seductively",
    "arched-back": "with arched back pose",
    "on-all-fours": "on all fours position",
    "side-lying": "lying on side",
    "bent-over": "bent over",
    "looking-back": "looking back over shoulder",
    "hands-and-knees": "on hands and knees",
}

SKIN_TONE_LABELS: tuple[str, ...] = (
    "very fair porcelain white",
    "fair light",
    "light peach",
    "light tan",
    "medium light",
    "medium olive",
    "medium tan",
    "tan brown",
    "medium dark brown",
    "dark brown",
    "very dark deep brown",
)

SKIN_TONE_FALLBACK = "medium"


def skin_tone_label(index: int) -> str:
    """Return the descriptive label for a skin-tone slider position."""
    if 0 <= index < len(SKIN_TONE_LABELS):
        return SKIN_TONE_LABELS[index]
    return SKIN_TONE_FALLBACK


# ---------------------------------------------------------------------------
# Settings sections.
# ---------------------------------------------------------------------------


def _settings_fragments(settings: GenerationSettings) -> list[str]:
    parts: list[str] = []

    # --- Aspect ratio ------------------------------------------------------
    if settings.aspect_ratio == "custom" and settings.custom_aspect_ratio:
        parts.append(f"Image aspect ratio: {settings.custom_aspect_ratio}.")
    elif settings.aspect_ratio != "auto":
        parts.append(f"Image aspect ratio: {settings.aspect_ratio}.")

    # --- Camera angle ------------------------------------------------------
    if settings.camera_angle == "custom" and settings.custom_camera_angle:
        parts.append(f"Camera angle: {settings.custom_camera_angle}.")
    elif settings.camera_angle != "auto":
        angle = CAMERA_ANGLE_PHRASES.get(settings.camera_angle, settings.camera_angle)
        parts.append(f"Camera angle: {angle}.")

    # --- Lighting ----------------------------------------------------------
    if settings.lighting != "auto":
        lighting = LIGHTING_PHRASES.get(settings.lighting, settings.lighting)
        parts.append(f"Lighting: {lighting}.")

    # --- Detail levels -----------------------------------------------------
    if settings.skin_detail != "auto":
        parts.append(f"{SKIN_DETAIL_PHRASES.get(settings.skin_detail, settings.skin_detail)}.")
    if settings.eye_detail != "auto":
        parts.append(f"{EYE_DETAIL_PHRASES.get(settings.eye_detail, settings.eye_detail)}.")

    # --- Background --------------------------------------------------------
    if settings.background_image:
        parts.append(BACKGROUND_IMAGE_SENTENCE)
    if settings.background_text:
        parts.append(f"Background/setting: {settings.background_text}.")
    if settings.confine_to_background and (
        settings.background_image or settings.background_text
    ):
        parts.append(CONFINE_BACKGROUND_SENTENCE)

    return parts


# ---------------------------------------------------------------------------
# Character sections.
# ---------------------------------------------------------------------------


def _prop_clause(prop: Prop) -> str:
    clause = f"Prop: {prop.name}"
    if prop.placement:
        clause += f" placed {prop.placement}"
    clause += "."
    if prop.image_data:
        clause += f" {PROP_IMAGE_SENTENCE}"
    return clause


def build_character_fragment(character: CharacterConfig, index: int) -> str:
    """Compile the prompt section for one character.

    Args:
        character: The character to describe.
        index: Zero-based position in the character list; used for the
            ``"Person N"`` label when the character's label is empty.

    Returns:
        The character section, opened by ``[Label]:``.
    """
    label = character.label or f"Person {index + 1}"
    parts: list[str] = [f"[{label}]:"]

    # Face
    if character.face_image:
        if character.preserve_exact_head:
            parts.append(EXACT_HEAD_SENTENCE)
        else:
            parts.append(FACE_REFERENCE_SENTENCE)

    # Hairstyle
    if character.hairstyle_option == "default":
        parts.append(DEFAULT_HAIRSTYLE_SENTENCE)
    elif character.hairstyle_option == "custom-text":
        if character.hairstyle_text:
            parts.append(f"Hairstyle: {character.hairstyle_text}.")
    elif character.hairstyle_option == "custom-image":
        parts.append(HAIRSTYLE_IMAGE_SENTENCE)

    # Clothing
    if character.clothing_image:
        parts.append(CLOTHING_IMAGE_SENTENCE)
    if character.clothing_text:
        parts.append(f"Clothing: {character.clothing_text}.")

    # Body
    parts.append(
        f"Body proportions: chest size {character.chest_size}, "
        f"butt size {character.butt_size}, stomach size {character.stomach_size}."
    )
    parts.append(f"Skin tone: {skin_tone_label(character.skin_tone)}.")

    # Expression
    if character.expression_preset == "default":
        parts.append(DEFAULT_EXPRESSION_SENTENCE)
    elif character.expression_preset == "custom" and character.custom_expression:
        parts.append(f"Expression: {character.custom_expression}.")
    else:
        parts.append(f"Expression: {character.expression_preset}.")

    # Pose
    if character.pose_preset not in ("none", "custom"):
        pose = POSE_PHRASES.get(character.pose_preset, character.pose_preset)
        parts.append(f"Pose: {pose}.")
    if character.action_prompt:
        parts.append(f"Action/pose: {character.action_prompt}.")
    if character.pose_reference_image:
        parts.append(POSE_REFERENCE_SENTENCE)

    # Props without a name cannot be described; their images are still sent.
    for prop in character.props:
        if prop.name:
            parts.append(_prop_clause(prop))

    return " ".join(parts)


def build_prompt(
    characters: Sequence[CharacterConfig],
    settings: GenerationSettings,
) -> str:
    """Compile the full generation prompt.

    Args:
        characters: Characters in display order.  Must not be empty.
        settings: Shared generation settings.

    Returns:
        The compiled prompt with top-level sections separated by double
        newlines (``\\n\\n``).

    Raises:
        ValueError: If ``characters`` is empty.
    """
    if not characters:
        raise ValueError("At least one character is required to build a prompt")

    parts: list[str] = [LEAD_SENTENCE]
    parts.extend(_settings_fragments(settings))
    parts.extend(
        build_character_fragment(character, index) for index, character in enumerate(characters)
    )

    return "\n\n".join(parts)
