"""
Conversation content models.

A Turn is one role-attributed message; a Part is one content item inside it.
Parts are a tagged union: either inline text or a base64-encoded file.
"""

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Role = Literal["user", "model"]


class PartType(str, Enum):
    """Discriminator for Part variants."""

    TEXT = "text"
    FILE = "file"


class Part(BaseModel):
    """One content item of a turn (text or file)."""

    model_config = ConfigDict(validate_assignment=True)

    type: PartType = Field(..., description="Which variant is populated")
    text: Optional[str] = Field(default=None, description="Inline text")
    mime_type: Optional[str] = Field(default=None, description="MIME type of the file")
    base64_data: Optional[str] = Field(
        default=None, description="Base64 payload of the file"
    )
    filename: Optional[str] = Field(
        default=None, description="Original file name, local only"
    )

    @model_validator(mode="after")
    def _check_variant(self) -> "Part":
        if self.type == PartType.TEXT:
            if self.text is None:
                raise ValueError("text part requires text")
            if self.mime_type is not None or self.base64_data is not None:
                raise ValueError("text part cannot carry file data")
        else:
            if self.mime_type is None or self.base64_data is None:
                raise ValueError("file part requires mime_type and base64_data")
            if self.text is not None:
                raise ValueError("file part cannot carry inline text")
        return self

    @classmethod
    def text_part(cls, text: str) -> "Part":
        return cls(type=PartType.TEXT, text=text)

    @classmethod
    def file_part(
        cls, mime_type: str, base64_data: str, filename: Optional[str] = None
    ) -> "Part":
        return cls(
            type=PartType.FILE,
            mime_type=mime_type,
            base64_data=base64_data,
            filename=filename,
        )

    @property
    def is_file(self) -> bool:
        return self.type == PartType.FILE

    def to_wire(self) -> Dict[str, Any]:
        """Serialize to the official API part shape."""
        if self.type == PartType.TEXT:
            return {"text": self.text}
        return {"inlineData": {"mimeType": self.mime_type, "data": self.base64_data}}

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> Optional["Part"]:
        """Parse an official API part; returns None for unsupported shapes."""
        if not isinstance(data, dict):
            return None
        text = data.get("text")
        if isinstance(text, str):
            return cls.text_part(text)
        inline = data.get("inlineData")
        if isinstance(inline, dict):
            mime_type = inline.get("mimeType")
            payload = inline.get("data")
            if isinstance(mime_type, str) and isinstance(payload, str):
                return cls.file_part(mime_type, payload)
        return None


class Turn(BaseModel):
    """One message of the conversation."""

    role: Role
    parts: List[Part] = Field(default_factory=list)

    @property
    def first_text(self) -> Optional[str]:
        """Text of the first part, if the first part is text."""
        if self.parts and self.parts[0].type == PartType.TEXT:
            return self.parts[0].text
        return None

    def to_wire(self) -> Dict[str, Any]:
        return {"role": self.role, "parts": [part.to_wire() for part in self.parts]}

    @classmethod
    def from_wire(cls, data: Dict[str, Any]) -> Optional["Turn"]:
        """Parse an official API content item; None when role or parts are invalid."""
        role = data.get("role") if isinstance(data, dict) else None
        parts = data.get("parts") if isinstance(data, dict) else None
        if role not in ("user", "model") or not isinstance(parts, list):
            return None
        parsed = [Part.from_wire(item) for item in parts]
        return cls(role=role, parts=[part for part in parsed if part is not None])
