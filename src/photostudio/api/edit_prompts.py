"""Instruction builders for the appearance, clothing and retouch editors.

Each editor takes an existing photo and asks the service to change one
aspect of it.  The instructions follow the same pattern as the main prompt
compiler on a smaller scale: a fixed "preserve everything except X"
preamble, zero or more clauses for whatever was requested, and a fixed
closing sentence asking for one photorealistic image.

Appearance and clothing instructions are line-based (joined with ``\\n``);
the service receives the source photo as the first reference image.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from photostudio.core.models import CharacterConfig

MAX_CLOTHING_IMAGES = 5

# ---------------------------------------------------------------------------
# Colour palettes offered by the appearance editor, with display names.
# Custom colours outside these tables are passed through as-is.
# ---------------------------------------------------------------------------

SKIN_COLORS: tuple[str, ...] = (
    "#FDEBD0", "#FCD5A8", "#F5C49C", "#E8B48A", "#D4A574",
    "#C4956A", "#A67B5B", "#8D6748", "#6F4E37", "#5C3D2E", "#3B2417",
)

HAIR_COLOR_LABELS: dict[str, str] = {
    "#FAFAD2": "Platinum Blonde",
    "#F5DEB3": "Light Blonde",
    "#DAA520": "Golden",
    "#D2691E": "Auburn",
    "#CD853F": "Light Brown",
    "#A0522D": "Medium Brown",
    "#8B4513": "Dark Brown",
    "#654321": "Espresso",
    "#3B2F2F": "Near Black",
    "#1C1C1C": "Jet Black",
    "#000000": "Black",
    "#B22222": "Deep Red",
    "#DC143C": "Crimson",
    "#FF6347": "Strawberry",
    "#FF69B4": "Pink",
    "#DA70D6": "Lavender",
    "#9370DB": "Purple",
    "#4169E1": "Blue",
    "#00CED1": "Teal",
    "#32CD32": "Green",
    "#808080": "Silver/Gray",
}

EYE_COLOR_LABELS: dict[str, str] = {
    "#8B4513": "Dark Brown",
    "#654321": "Brown",
    "#3B2F2F": "Deep Brown",
    "#1C1C1C": "Near Black",
    "#006400": "Dark Green",
    "#228B22": "Green",
    "#6B8E23": "Olive Green",
    "#9ACD32": "Light Green",
    "#4169E1": "Blue",
    "#1E90FF": "Light Blue",
    "#87CEEB": "Sky Blue",
    "#ADD8E6": "Pale Blue",
    "#708090": "Slate Gray",
    "#808080": "Gray",
    "#A9A9A9": "Light Gray",
    "#C0C0C0": "Silver",
    "#DAA520": "Amber",
    "#B8860B": "Dark Amber",
    "#FF8C00": "Hazel",
    "#9370DB": "Violet",
}

APPEARANCE_PREAMBLE = (
    "Edit this photo of a person. Keep the person, pose, background, and clothing EXACTLY "
    "the same. ONLY change the following specific features:"
)
APPEARANCE_NO_CHANGES = "No changes specified; return the image as-is."
APPEARANCE_CLOSING = (
    "Do NOT change anything else about the person: same face, same expression, same body, "
    "same clothing, same background. Output a single photorealistic image."
)

CLOTHING_PREAMBLE = (
    "Edit this photo of a person. Change ONLY the clothing they are wearing. Keep the "
    "person's face, expression, hair, body, pose, and background EXACTLY the same. Do NOT "
    "alter anything other than the clothes."
)
CLOTHING_REFERENCE_SENTENCE = (
    "Dress the person in the exact clothing shown in the provided clothing reference "
    "image(s). Match the style, color, fit, and details precisely."
)
CLOTHING_CLOSING = (
    "Output a single photorealistic image. The person must look identical except for the "
    "clothing."
)

RETOUCH_MASKED_INSTRUCTION = (
    "Look at the second image: it is a black and white mask. The WHITE areas indicate the "
    "regions that need retouching on the first image. ONLY retouch those specific "
    "white-masked areas: remove blemishes, acne, spots, scars, dark circles, and skin "
    "imperfections in those regions. Keep ALL other areas completely untouched. Do NOT "
    "change facial features, face shape, eye color, hair, expression, pose, clothing, or "
    "background. Output a single photorealistic image."
)
RETOUCH_FULL_INSTRUCTION = (
    "Retouch this photo. Remove all blemishes, acne, spots, scars, dark circles, uneven skin "
    "texture, and any visible skin imperfections. Smooth and even out the skin tone while "
    "keeping it looking completely natural and photorealistic. Do NOT change the person's "
    "facial features, face shape, eye color, hair, expression, pose, clothing, or background. "
    "Only clean up and retouch the skin. Output a single photorealistic image."
)


def color_name(value: str, labels: dict[str, str]) -> str:
    """Return the display name of a palette colour, or the value itself."""
    return labels.get(value.upper(), value)


# ---------------------------------------------------------------------------
# Appearance editor.
# ---------------------------------------------------------------------------


class AppearanceEdit(BaseModel):
    """Requested colour changes for an existing photo."""

    source_image: str
    skin_color: str = ""
    hair_color: str = ""
    eye_color: str = ""
    hair_reference_image: str | None = None
    eye_reference_image: str | None = None

    def has_changes(self) -> bool:
        return bool(
            self.skin_color
            or self.hair_color
            or self.eye_color
            or self.hair_reference_image
            or self.eye_reference_image
        )


def build_appearance_prompt(edit: AppearanceEdit) -> str:
    """Compile the instruction for an appearance (colour) edit."""
    parts: list[str] = [APPEARANCE_PREAMBLE]

    if edit.skin_color:
        parts.append(f"- Change their skin color to: {edit.skin_color}.")
    if edit.hair_color:
        name = color_name(edit.hair_color, HAIR_COLOR_LABELS)
        parts.append(f"- Change their hair color to: {name} ({edit.hair_color}).")
    if edit.hair_reference_image:
        parts.append(
            "- Change their hair to match the color and style shown in the provided hair "
            "reference image."
        )
    if edit.eye_color:
        name = color_name(edit.eye_color, EYE_COLOR_LABELS)
        parts.append(f"- Change their eye color to: {name} ({edit.eye_color}).")
    if edit.eye_reference_image:
        parts.append(
            "- Change their eyes to match the color shown in the provided eye reference image."
        )
    if not edit.has_changes():
        parts.append(APPEARANCE_NO_CHANGES)

    parts.append(APPEARANCE_CLOSING)
    return "\n".join(parts)


def collect_appearance_references(edit: AppearanceEdit) -> list[str]:
    """Return the source photo followed by the hair and eye references."""
    images = [edit.source_image]
    if edit.hair_reference_image:
        images.append(edit.hair_reference_image)
    if edit.eye_reference_image:
        images.append(edit.eye_reference_image)
    return images


def character_appearance_edit(character: CharacterConfig, source_image: str) -> AppearanceEdit:
    """Pre-fill an appearance edit from a character's colour overrides."""
    return AppearanceEdit(
        source_image=source_image,
        skin_color=character.skin_color or "",
        hair_color=character.hair_color or "",
        eye_color=character.eye_color or "",
        hair_reference_image=character.hair_color_reference_image,
        eye_reference_image=character.eye_color_reference_image,
    )


# ---------------------------------------------------------------------------
# Clothing editor.
# ---------------------------------------------------------------------------


class ClothingEdit(BaseModel):
    """Requested clothing replacement for an existing photo."""

    source_image: str
    clothing_images: list[str] = Field(default_factory=list, max_length=MAX_CLOTHING_IMAGES)
    clothing_description: str = ""

    def has_changes(self) -> bool:
        return bool(self.clothing_images or self.clothing_description)


def build_clothing_prompt(edit: ClothingEdit) -> str:
    """Compile the instruction for a clothing edit."""
    parts: list[str] = [CLOTHING_PREAMBLE]

    if edit.clothing_images:
        parts.append(CLOTHING_REFERENCE_SENTENCE)
    if edit.clothing_description:
        parts.append(f"Clothing description: {edit.clothing_description}.")

    parts.append(CLOTHING_CLOSING)
    return "\n".join(parts)


def collect_clothing_references(edit: ClothingEdit) -> list[str]:
    """Return the source photo followed by each clothing reference."""
    return [edit.source_image, *edit.clothing_images]


# ---------------------------------------------------------------------------
# Retouch.
# ---------------------------------------------------------------------------


def build_retouch_prompt(masked: bool) -> str:
    """Return the retouch instruction.

    Args:
        masked: ``True`` when a mask accompanies the photo; only the white
            regions of the mask may then be altered.
    """
    return RETOUCH_MASKED_INSTRUCTION if masked else RETOUCH_FULL_INSTRUCTION
