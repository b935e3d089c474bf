"""Reference image collection for generation requests.

The inference service attaches reference images positionally, so the order
produced here matches the order in which the prompt mentions them:

1. Background image
2. For each character, in list order:
   face, clothing, pose reference, hairstyle image (``custom-image`` mode
   only), then each prop image in prop order

Missing images are skipped.  Identical payloads referenced from two fields
are sent twice; no de-duplication happens.
"""

from __future__ import annotations

from collections.abc import Sequence

from photostudio.core.models import CharacterConfig, GenerationSettings


def collect_character_images(character: CharacterConfig) -> list[str]:
    """Return the reference images contributed by one character."""
    images: list[str] = []

    if character.face_image:
        images.append(character.face_image)
    if character.clothing_image:
        images.append(character.clothing_image)
    if character.pose_reference_image:
        images.append(character.pose_reference_image)
    if character.hairstyle_option == "custom-image" and character.hairstyle_image:
        images.append(character.hairstyle_image)

    # Unlike the prompt, prop names are irrelevant here.
    images.extend(prop.image_data for prop in character.props if prop.image_data)

    return images


def collect_reference_images(
    characters: Sequence[CharacterConfig],
    settings: GenerationSettings,
) -> list[str]:
    """Collect every reference image for a request, in submission order.

    Args:
        characters: Characters in display order.
        settings: Shared generation settings.

    Returns:
        Ordered list of image payloads.
    """
    images: list[str] = []

    if settings.background_image:
        images.append(settings.background_image)

    for character in characters:
        images.extend(collect_character_images(character))

    return images
