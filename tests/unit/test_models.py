"""Unit tests for the configuration model."""

import pytest
from pydantic import ValidationError

from photostudio.core.models import (
    CharacterConfig,
    DistinguishingMark,
    GeneratedImage,
    GenerationSettings,
    Prop,
    create_default_character,
)


class TestCharacterConfig:
    """Tests for CharacterConfig defaults and validation."""

    def test_default_values(self):
        character = create_default_character(2)

        assert character.label == "Person 3"
        assert character.face_image is None
        assert character.additional_face_images == []
        assert character.chest_size == "medium"
        assert character.butt_size == "medium"
        assert character.stomach_size == "medium"
        assert character.skin_tone == 5
        assert character.expression_preset == "default"
        assert character.pose_preset == "none"
        assert character.hairstyle_option == "default"
        assert character.preserve_exact_head is False
        assert character.height_enabled is False
        assert character.props == []
        assert character.marks == []

    def test_explicit_id(self):
        assert create_default_character(0, character_id="abc").id == "abc"

    def test_generated_ids_are_unique(self):
        assert create_default_character(0).id != create_default_character(0).id

    @pytest.mark.parametrize("value,expected", [(-3, 0), (0, 0), (7, 7), (10, 10), (42, 10)])
    def test_skin_tone_clamped(self, value, expected):
        assert CharacterConfig(skin_tone=value).skin_tone == expected

    @pytest.mark.parametrize("value,expected", [(20, 48), (48, 48), (70, 70), (78, 78), (90, 78)])
    def test_height_clamped(self, value, expected):
        assert CharacterConfig(height_inches=value).height_inches == expected

    def test_invalid_enum_rejected(self):
        with pytest.raises(ValidationError):
            CharacterConfig(pose_preset="flying")

    def test_too_many_additional_faces(self):
        with pytest.raises(ValidationError):
            CharacterConfig(additional_face_images=["a", "b", "c", "d", "e"])

    def test_marks_and_props(self):
        character = CharacterConfig(
            props=[Prop(name="cup")],
            marks=[DistinguishingMark(type="tattoo", description="rose on left wrist")],
        )
        assert character.props[0].name == "cup"
        assert character.marks[0].type == "tattoo"

    def test_invalid_mark_type(self):
        with pytest.raises(ValidationError):
            DistinguishingMark(type="freckle")


class TestGenerationSettings:
    def test_defaults(self):
        settings = GenerationSettings()

        assert settings.model == "high-quality"
        assert settings.aspect_ratio == "auto"
        assert settings.camera_angle == "auto"
        assert settings.lighting == "auto"
        assert settings.skin_detail == "auto"
        assert settings.eye_detail == "auto"
        assert settings.background_image is None
        assert settings.confine_to_background is False
        assert settings.image_count == 1

    def test_image_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            GenerationSettings(image_count=0)


class TestGeneratedImage:
    def test_snapshot_is_independent(self):
        character = CharacterConfig(label="Alice", props=[Prop(name="hat")])
        settings = GenerationSettings(lighting="soft")

        image = GeneratedImage.create("url", "prompt", [character], settings)
        character.label = "Bob"
        character.props[0].name = "scarf"
        settings.lighting = "neon"

        assert image.characters[0].label == "Alice"
        assert image.characters[0].props[0].name == "hat"
        assert image.settings.lighting == "soft"

    def test_frozen(self):
        image = GeneratedImage.create("url", "prompt", [CharacterConfig()], GenerationSettings())
        with pytest.raises(ValidationError):
            image.prompt = "changed"

    def test_json_round_trip(self):
        image = GeneratedImage.create("url", "prompt", [CharacterConfig()], GenerationSettings())
        restored = GeneratedImage.model_validate(image.model_dump(mode="json"))
        assert restored == image
