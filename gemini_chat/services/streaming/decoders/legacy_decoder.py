"""
Decoder for the key-free web endpoint.

Every payload line is a JSON array whose first element carries, at index 2,
a *string* that is itself JSON. The interesting values sit at fixed
positions inside that inner array. The format is undocumented and
versionless: any missing index simply means "not there yet".

Each line repeats the whole response so far, so output is produced by
diffing against the previously seen fragment.
"""

import json
import logging
from typing import Any

from common.constants import ANTI_HIJACK_PREFIX, LEGACY_NOISE_MARKER
from gemini_chat.entity.session import (
    LOCATION_DONE,
    LOCATION_MAP,
    LOCATION_NAME,
    LegacyStreamState,
)
from gemini_chat.services.streaming.decoders.base import StreamDecoder, walk_path

logger = logging.getLogger(__name__)

# Outer envelope: root[0][2] holds the stringified inner payload
ENVELOPE_PATH = (0,)
INNER_PAYLOAD_INDEX = 2

# Inner payload positions
RESPONSE_TEXT_PATH = (4, 0, 1, 0)
CODE_BLOCK_PATH = (4, 0, 30, 0, 4)
LOCATION_PATH = (5,)
LOCATION_NAME_INDEX = 0
LOCATION_MAP_INDEX = 4


class LegacyDecoder(StreamDecoder):
    """Decodes the nested-array stream and prints only new characters."""

    stream_prefix = ANTI_HIJACK_PREFIX

    def __init__(self, sink: Any, state: LegacyStreamState):
        super().__init__(sink)
        self.state = state

    def accepts(self, line: str) -> bool:
        return line.startswith("[")

    def decode(self, line: str) -> None:
        cleaned = line.replace(LEGACY_NOISE_MARKER, "")
        try:
            root = json.loads(cleaned)
        except json.JSONDecodeError:
            logger.warning("Error in received data, skipping line")
            return

        envelope = walk_path(root, ENVELOPE_PATH)
        if not isinstance(envelope, list):
            return

        if len(envelope) <= INNER_PAYLOAD_INDEX:
            self._flush_code_block()
            return

        inner_source = envelope[INNER_PAYLOAD_INDEX]
        if not isinstance(inner_source, str):
            return
        try:
            inner = json.loads(inner_source)
        except json.JSONDecodeError:
            return

        if self.state.location_bits > 0:
            self._collect_location(inner)
            return

        text = walk_path(inner, RESPONSE_TEXT_PATH)
        if isinstance(text, str):
            self._emit_fragment(text)

        code = walk_path(inner, CODE_BLOCK_PATH)
        if isinstance(code, str):
            self.state.code_buffer = code

    def _emit_fragment(self, current: str) -> None:
        last = self.state.last_fragment
        if len(current) > len(last) and current.startswith(last):
            self.sink.write(current[len(last):])
        elif last and len(current) < len(last):
            # Corrected, shorter replacement: overwrite what was printed
            self.sink.repaint(len(last), current)
        self.state.last_fragment = current
        self.accumulator.replace(current)

    def _flush_code_block(self) -> None:
        if self.state.code_buffer is not None:
            self.sink.write(f"\n\n{self.state.code_buffer}\n")
            self.state.code_buffer = None

    def _collect_location(self, inner: Any) -> None:
        if not isinstance(inner, list) or len(inner) <= LOCATION_PATH[0]:
            return
        location = inner[LOCATION_PATH[0]]
        bits = self.state.location_bits
        if bits & LOCATION_NAME:
            name = walk_path(location, (LOCATION_NAME_INDEX,))
            if isinstance(name, str):
                self.sink.write(f"{name}\n")
                self.state.location_bits = (bits & ~LOCATION_NAME) | LOCATION_DONE
        elif bits & LOCATION_MAP:
            link = walk_path(location, (LOCATION_MAP_INDEX,))
            if isinstance(link, str):
                self.sink.write(f"https:{link}\n")
                self.state.location_bits = (bits & ~LOCATION_MAP) | LOCATION_DONE
        self.state.location_gathered = True

    @property
    def abort_requested(self) -> bool:
        return (
            self.state.location_bits > 0
            and self.state.location_gathered
            and not self.state.location_pending
        )

    @property
    def side_channel_complete(self) -> bool:
        return self.state.location_gathered
