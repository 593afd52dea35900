"""
Incremental Server-Sent Events Decoder

Turns the raw byte chunks of a streaming chat-completion body into the
``data:`` payload strings it carries.

Chunk boundaries fall anywhere: inside a multibyte character, inside a line,
or between the two newlines that end an event. The decoder therefore keeps
two buffers between calls, undecoded trailing bytes (in the incremental
UTF-8 decoder) and the text of the last, still incomplete event.
"""

import codecs

from retort.core.config.constants import (
    SSE_DATA_PREFIX,
    SSE_DONE_SENTINEL,
    SSE_EVENT_DELIMITER,
)


class SSEDecoder:
    """
    Stateful decoder for one response body.

    Usage:
        decoder = SSEDecoder()
        async for chunk in response.aiter_bytes():
            for data in decoder.feed(chunk):
                handle(json.loads(data))
        for data in decoder.flush():
            handle(json.loads(data))
    """

    def __init__(self) -> None:
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text of the incomplete event retained for the next chunk."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[str]:
        """
        Decode one chunk and return the payloads of every completed event.

        The trailing partial event stays buffered.
        """
        self._buffer += self._decoder.decode(chunk)
        self._buffer = self._buffer.replace("\r\n", "\n")

        events = self._buffer.split(SSE_EVENT_DELIMITER)
        self._buffer = events.pop()

        payloads: list[str] = []
        for event in events:
            payloads.extend(self._event_payloads(event))
        return payloads

    def flush(self) -> list[str]:
        """End of body: decode what is left, including an unterminated event."""
        self._buffer += self._decoder.decode(b"", final=True)
        remaining, self._buffer = self._buffer.replace("\r\n", "\n"), ""
        payloads: list[str] = []
        for event in remaining.split(SSE_EVENT_DELIMITER):
            payloads.extend(self._event_payloads(event))
        return payloads

    @staticmethod
    def _event_payloads(event: str) -> list[str]:
        payloads = []
        for raw_line in event.split("\n"):
            line = raw_line.strip()
            # Comments (": keep-alive") and event/id fields carry no content
            if not line.startswith(SSE_DATA_PREFIX):
                continue
            data = line[len(SSE_DATA_PREFIX):].strip()
            if not data or data == SSE_DONE_SENTINEL:
                continue
            payloads.append(data)
        return payloads
