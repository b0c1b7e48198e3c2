"""Server-Sent Events plumbing shared by the streaming endpoints."""

import asyncio
import json
from collections.abc import AsyncGenerator, Awaitable, Callable

import structlog
from fastapi.responses import StreamingResponse

from blogdesk.core.exceptions import AppException
from blogdesk.schemas.chat_schema import StreamEvent
from blogdesk.services.completion_client import TokenCallback

logger = structlog.get_logger()

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

Producer = Callable[[TokenCallback], Awaitable[StreamEvent]]

# Producers outlive disconnected clients; keep them referenced until done.
_running: set[asyncio.Task[None]] = set()


def format_event(event: StreamEvent) -> str:
    return f"data: {json.dumps(event.model_dump(), ensure_ascii=False)}\n\n"


def error_event(exc: AppException) -> StreamEvent:
    return StreamEvent(
        event="error", data=json.dumps({"code": exc.code, "message": exc.message})
    )


async def relay_events(produce: Producer) -> AsyncGenerator[str, None]:
    """Relay ``token`` events from ``produce`` followed by its final event.

    The producer runs in its own task, so a client that disconnects
    mid-stream does not cancel it and its result is still persisted.
    """
    queue: asyncio.Queue[StreamEvent | None] = asyncio.Queue()

    def on_token(fragment: str) -> None:
        queue.put_nowait(StreamEvent(event="token", data=fragment))

    async def run() -> None:
        try:
            queue.put_nowait(await produce(on_token))
        except AppException as exc:
            queue.put_nowait(error_event(exc))
        except Exception:
            logger.exception("Stream producer failed")
            queue.put_nowait(
                StreamEvent(
                    event="error",
                    data=json.dumps(
                        {"code": "INTERNAL_ERROR", "message": "Stream failed"}
                    ),
                )
            )
        finally:
            queue.put_nowait(None)

    task = asyncio.create_task(run())
    _running.add(task)
    task.add_done_callback(_running.discard)

    while True:
        event = await queue.get()
        if event is None:
            break
        yield format_event(event)


def sse_response(produce: Producer) -> StreamingResponse:
    return StreamingResponse(
        relay_events(produce),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
