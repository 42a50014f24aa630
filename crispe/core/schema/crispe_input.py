"""CRISPE input record and target output language."""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Union


class Language(str, Enum):
    """Output language of the optimized prompt.

    ``CN`` asks the provider for a Chinese and an English version separated by
    the split marker; ``EN`` asks for the English version only.
    """

    EN = "en"
    CN = "cn"

    @classmethod
    def parse(cls, value: Union["Language", str]) -> "Language":
        """Coerce a string such as ``"cn"`` into a Language.

        Raises:
            ValueError: If value is not a supported language
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            supported = ", ".join(lang.value for lang in cls)
            raise ValueError(f"Unknown language: {value!r}. Supported: {supported}") from None


@dataclass(frozen=True)
class CrispeInput:
    """The six CRISPE fields as entered by the user.

    All fields default to the empty string. Front ends keep their own mutable
    state and hand the builder a frozen snapshot of it.

    Attributes:
        context: Background of the task
        role: Persona the model should adopt
        instruction: What the model must do (required by front ends)
        specifics: Constraints, tone, length and format details
        process: Steps the model should follow
        example: Sample of the expected output
    """

    context: str = ""
    role: str = ""
    instruction: str = ""
    specifics: str = ""
    process: str = ""
    example: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CrispeInput":
        """Build an input from a mapping, ignoring unknown keys.

        ``None`` values are treated as empty fields.
        """
        known = {f.name for f in fields(cls)}
        values = {
            key: "" if value is None else str(value)
            for key, value in data.items()
            if key in known
        }
        return cls(**values)

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def has_instruction(self) -> bool:
        """Whether the instruction field holds non-blank text."""
        return bool(self.instruction.strip())
