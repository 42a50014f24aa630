"""Unit tests for schema definitions."""

import dataclasses

import pytest

from crispe.core.schema import CompletionMessage, CrispeInput, GeneratedPrompts, Language


class TestLanguage:
    """Tests for Language parsing."""

    def test_parse_accepts_strings_and_members(self):
        assert Language.parse("en") is Language.EN
        assert Language.parse("CN") is Language.CN
        assert Language.parse(Language.CN) is Language.CN

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError, match="Supported: en, cn"):
            Language.parse("de")

    def test_language_compares_to_string(self):
        assert Language.EN == "en"


class TestCrispeInput:
    """Tests for the CRISPE input record."""

    def test_defaults_are_empty(self):
        data = CrispeInput()

        assert data.to_dict() == {
            "context": "",
            "role": "",
            "instruction": "",
            "specifics": "",
            "process": "",
            "example": "",
        }

    def test_input_is_immutable(self):
        data = CrispeInput(instruction="Write")

        with pytest.raises(dataclasses.FrozenInstanceError):
            data.instruction = "Rewrite"

    def test_from_dict_ignores_unknown_keys_and_none(self):
        data = CrispeInput.from_dict({"instruction": "Write", "role": None, "tone": "dry"})

        assert data.instruction == "Write"
        assert data.role == ""
        assert not hasattr(data, "tone")

    def test_has_instruction(self):
        assert CrispeInput(instruction="Write").has_instruction()
        assert not CrispeInput(instruction="  \n").has_instruction()
        assert not CrispeInput(context="only context").has_instruction()


class TestMessages:
    """Tests for CompletionMessage and GeneratedPrompts."""

    def test_message_wire_shape(self):
        message = CompletionMessage(role="user", content="hi")

        assert message.to_dict() == {"role": "user", "content": "hi"}

    def test_unknown_role_raises_error(self):
        with pytest.raises(ValueError, match="Unknown message role"):
            CompletionMessage(role="assistant", content="hi")

    def test_generated_prompts_defaults(self):
        assert GeneratedPrompts().to_dict() == {"en": "", "cn": ""}
