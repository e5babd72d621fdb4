"""
Session persistence.

A saved session is the same JSON document that is sent to the official API
(system instruction, contents, tools, generation config), pretty-printed.
Loading only restores the conversation and the system prompt.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from common.exception.exceptions import SessionFileError
from gemini_chat.config.chat_config import ChatConfig
from gemini_chat.entity.session import ChatSession
from gemini_chat.models.content import Turn
from gemini_chat.services.payloads.standard_payload import build_request_body

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SessionStore:
    """Reads and writes session documents."""

    def __init__(self, config: ChatConfig):
        self.config = config

    def save(self, session: ChatSession, path: PathLike) -> Path:
        target = Path(path)
        document = build_request_body(
            self.config, session.current_history_snapshot(), session.system_prompt
        )
        try:
            target.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise SessionFileError(f"Failed to write session file {target}: {e}") from e

        session.name = target.stem
        logger.info(f"Conversation history saved to {target}")
        return target

    def load(self, session: ChatSession, path: PathLike) -> None:
        """Replace the session's history and system prompt with a saved document.

        Raises:
            SessionFileError: If the file is unreadable or not a session object.
                The session is left untouched in that case.
        """
        source = Path(path)
        try:
            raw = source.read_text(encoding="utf-8")
        except OSError as e:
            raise SessionFileError(f"Failed to read session file {source}: {e}") from e

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise SessionFileError(f"Session file {source} is not valid JSON: {e}") from e
        if not isinstance(document, dict):
            raise SessionFileError(f"Session file {source} is not a valid history object")

        turns = parse_contents(document.get("contents"))
        session.history.replace(turns)
        system_prompt = parse_system_instruction(document.get("systemInstruction"))
        if system_prompt is not None:
            session.system_prompt = system_prompt
        session.name = source.stem
        logger.info(f"Conversation history loaded from {source} ({len(turns)} turns)")


def parse_contents(contents: object) -> List[Turn]:
    """Parse ``contents``; malformed items are skipped."""
    if not isinstance(contents, list):
        return []
    turns = []
    for item in contents:
        turn = Turn.from_wire(item)
        if turn is None:
            logger.warning("Skipping malformed content item in session file")
            continue
        turns.append(turn)
    return turns


def parse_system_instruction(instruction: object) -> Optional[str]:
    if not isinstance(instruction, dict):
        return None
    parts = instruction.get("parts")
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None
