"""Ordered conversation history with explicit rollback."""

import logging
from typing import Iterator, List, Sequence, Tuple

from common.exception.exceptions import HistoryIndexError
from gemini_chat.models.content import Part, Role, Turn

logger = logging.getLogger(__name__)


class HistoryStore:
    """Append-only sequence of turns, insertion order = conversational order.

    Turns are deep-copied on the way in and on the way out so callers never
    alias stored state.
    """

    def __init__(self, turns: Sequence[Turn] = ()):
        self._turns: List[Turn] = [turn.model_copy(deep=True) for turn in turns]

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(self.snapshot())

    def append(self, turn: Turn) -> None:
        """Append a deep copy of the turn."""
        self._turns.append(turn.model_copy(deep=True))

    def append_parts(self, role: Role, parts: Sequence[Part]) -> Turn:
        """Build a turn from parts and append it."""
        turn = Turn(role=role, parts=[part.model_copy(deep=True) for part in parts])
        self._turns.append(turn)
        return turn.model_copy(deep=True)

    def rollback_last(self) -> Turn:
        """Remove and return the most recent turn."""
        if not self._turns:
            raise HistoryIndexError("History is empty, nothing to roll back")
        turn = self._turns.pop()
        logger.debug(f"Rolled back last {turn.role} turn ({len(self._turns)} remaining)")
        return turn

    def clear(self) -> None:
        self._turns.clear()

    def replace(self, turns: Sequence[Turn]) -> None:
        """Replace the whole history (used when loading a saved session)."""
        self._turns = [turn.model_copy(deep=True) for turn in turns]

    def snapshot(self) -> List[Turn]:
        """Deep copy of all turns."""
        return [turn.model_copy(deep=True) for turn in self._turns]

    def last(self) -> Turn:
        if not self._turns:
            raise HistoryIndexError("History is empty")
        return self._turns[-1].model_copy(deep=True)

    def list_attachments(self) -> List[Tuple[int, int, Role, Part]]:
        """List file parts as (turn index, part index, role, part)."""
        found = []
        for turn_index, turn in enumerate(self._turns):
            for part_index, part in enumerate(turn.parts):
                if part.is_file:
                    found.append(
                        (turn_index, part_index, turn.role, part.model_copy(deep=True))
                    )
        return found

    def remove_attachment(self, turn_index: int, part_index: int) -> Part:
        """Remove a file part from a stored turn.

        Raises:
            HistoryIndexError: If either index is out of range or the part is
                not a file attachment.
        """
        if turn_index < 0 or turn_index >= len(self._turns):
            raise HistoryIndexError(f"Invalid message index {turn_index}")
        turn = self._turns[turn_index]
        if part_index < 0 or part_index >= len(turn.parts):
            raise HistoryIndexError(
                f"Invalid part index {part_index} for message {turn_index}"
            )
        if not turn.parts[part_index].is_file:
            raise HistoryIndexError(
                f"Part [{turn_index}:{part_index}] is not a file attachment"
            )
        return turn.parts.pop(part_index)
