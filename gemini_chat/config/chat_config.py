"""
Chat Client Configuration

Generation parameters, credentials and mode switches for a chat session.
Values come from the environment (see common.config.config) and can be
adjusted at runtime by the interactive commands.
"""

from dataclasses import dataclass
from typing import Optional

from common.config import config as env
from common.constants import FLASH_THINKING_BUDGET_CAP


@dataclass
class ChatConfig:
    """Configuration consumed by the payload builders and the transport."""

    model_name: str = "gemini-2.5-pro"
    api_key: str = ""
    origin: str = "default"  # "default" sends no Origin header
    proxy: str = ""

    # Generation parameters
    temperature: float = 0.75
    seed: int = 42
    max_output_tokens: int = 65536
    thinking_budget: int = -1  # -1 lets the model decide
    top_k: int = -1  # <= 0 is omitted from the payload
    top_p: float = -1.0  # <= 0 is omitted from the payload

    # Tools
    google_grounding: bool = True
    url_context: bool = True

    # Modes
    free_mode: bool = True
    location_mode: int = 0  # bit 0: location name, bit 1: map link
    request_timeout: float = 600.0

    system_prompt: Optional[str] = None

    @classmethod
    def from_env(cls) -> "ChatConfig":
        """Create configuration from environment variables."""
        config = cls(
            model_name=env.GEMINI_MODEL,
            api_key=env.GEMINI_API_KEY,
            origin=env.GEMINI_API_KEY_ORIGIN,
            proxy=env.GEMINI_PROXY,
            free_mode=env.GEMINI_FREE_MODE,
            request_timeout=env.REQUEST_TIMEOUT,
        )
        config.normalize()
        return config

    @property
    def is_pro_model(self) -> bool:
        return "pro" in self.model_name

    def normalize(self) -> None:
        """Apply model limits and mode rules."""
        if "flash" in self.model_name and self.thinking_budget > FLASH_THINKING_BUDGET_CAP:
            self.thinking_budget = FLASH_THINKING_BUDGET_CAP
        # Location lookups only exist on the key-free endpoint
        if self.location_mode:
            self.free_mode = True
        if not self.api_key:
            self.free_mode = True
