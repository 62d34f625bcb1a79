"""
Bridges a text stream to the speed monitor.

StreamHandler reads chunks, counts their tokens and announces the
stream's start, every chunk and its end. track_stream() connects those
announcements to a RateMonitor.
"""

from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass

from ..events import EventEmitter

STREAM_STARTED = "stream_started"
CHUNK_RECEIVED = "chunk_received"
STREAM_ENDED = "stream_ended"


@dataclass
class ChunkData:
    text: str
    token_count: int


def count_delta(text: str) -> int:
    """
    Count one per streamed delta, whatever the text.

    This is a per-delta count, not a tokenizer. It matches servers that
    send one token per delta; for servers that batch several tokens into a
    delta, pass a real token_counter to StreamHandler.
    """
    return 1


class StreamHandler(EventEmitter):
    def __init__(self, model: str, token_counter: Callable[[str], int] | None = None):
        super().__init__()
        self.model = model
        self.token_counter = token_counter or count_delta
        self.has_started = False

    async def relay(self, chunks: AsyncIterable[str]) -> AsyncIterator[str]:
        """
        Re-yield non-empty chunks, announcing each one.

        stream_started fires on the first non-empty chunk. stream_ended
        fires once if the stream started, including when the upstream
        fails part-way or the consumer stops early.
        """
        try:
            async for text in chunks:
                if not text:
                    continue
                if not self.has_started:
                    self.has_started = True
                    self.emit(STREAM_STARTED, self.model)

                self.emit(CHUNK_RECEIVED, ChunkData(text=text, token_count=self.token_counter(text)))
                yield text
        finally:
            if self.has_started:
                self.emit(STREAM_ENDED)

    async def handle_stream(self, chunks: AsyncIterable[str]) -> str:
        """Consume the whole stream and return its text."""
        return "".join([text async for text in self.relay(chunks)])


def track_stream(monitor, handler: StreamHandler):
    """
    Drive monitor's start/add/stop from handler's events.

    Once another stream starts a session on the same monitor, this
    handler's chunks and end are no longer forwarded.
    """
    session = None

    def on_started(model: str):
        nonlocal session
        monitor.start_tracking(model)
        session = monitor.session

    def owns_session() -> bool:
        return session is not None and monitor.session == session

    def on_chunk(chunk: ChunkData):
        if owns_session():
            monitor.add_tokens(chunk.token_count)

    def on_ended():
        if owns_session():
            monitor.stop_tracking()

    handler.on(STREAM_STARTED, on_started)
    handler.on(CHUNK_RECEIVED, on_chunk)
    handler.on(STREAM_ENDED, on_ended)
    return handler
