"""Chat messages sent to a completion provider and the generated result."""

from dataclasses import asdict, dataclass
from typing import Dict

ROLES = ("system", "user")


@dataclass(frozen=True)
class CompletionMessage:
    """One entry of the ordered message list sent to a provider.

    Attributes:
        role: "system" or "user"
        content: Message text
    """

    role: str
    content: str

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}. Supported: {', '.join(ROLES)}")

    def to_dict(self) -> Dict[str, str]:
        """Convert to the OpenAI-style wire shape ``{"role", "content"}``."""
        return {"role": self.role, "content": self.content}


@dataclass
class GeneratedPrompts:
    """Result of one successful generation.

    In English mode only ``en`` is populated. In Chinese mode both are
    expected, but ``en`` stays empty when the provider omitted the marker.
    """

    en: str = ""
    cn: str = ""

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)
