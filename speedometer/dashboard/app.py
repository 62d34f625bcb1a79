"""
Speedometer dashboard - FastAPI entrypoint.

Proxies streaming chat completions to an OpenAI-compatible upstream and
measures the generation speed on the way through. The live figures are
served as JSON for a status bar or details panel to render.

Start:
    python -m uvicorn speedometer.dashboard.app:create_app --factory --host 0.0.0.0 --port 8080
"""

import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import StreamingResponse

from ..config import MonitorConfig, load_config
from ..display.status import StatusIndicator
from ..monitor.rate_monitor import RateMonitor
from ..monitor.scheduler import AsyncioScheduler
from ..streaming.engine import InferenceEngine
from ..streaming.handler import StreamHandler, track_stream
from .history import SpeedHistory

logger = logging.getLogger(__name__)


def create_app(config: MonitorConfig | None = None, engine: InferenceEngine | None = None) -> FastAPI:
    config = config or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.engine = engine or InferenceEngine(config.upstream_url)
        app.state.indicator = StatusIndicator(position=config.position)
        app.state.monitor = RateMonitor(
            config=config,
            scheduler=AsyncioScheduler(),
            display=app.state.indicator,
        )
        app.state.history = SpeedHistory(app.state.monitor, max_points=config.history_points)

        if await app.state.engine.health_check():
            logger.info("Upstream ready at %s", config.upstream_url)
        else:
            logger.warning("Upstream not reachable at %s", config.upstream_url)

        yield

        app.state.history.close()
        app.state.monitor.dispose()
        await app.state.engine.close()

    app = FastAPI(
        title="Token Speedometer",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health(request: Request):
        upstream = await request.app.state.engine.health_check()
        return {"status": "ok", "upstream": upstream}

    @app.get("/metrics")
    async def get_metrics(request: Request):
        """Current session state, status-bar text and speed snapshot."""
        monitor: RateMonitor = request.app.state.monitor
        return {
            "state": monitor.state.value,
            "model": monitor.model,
            "display": request.app.state.indicator.render(),
            "metrics": monitor.metrics.to_dict(),
        }

    @app.get("/history")
    async def get_history(request: Request):
        return request.app.state.history.snapshot()

    @app.post("/v1/chat/completions")
    async def chat_completions(request: Request):
        body = await request.json()
        messages = body.get("messages", [])
        model = body.get("model") or "default"
        max_tokens = body.get("max_tokens", 1024)
        temperature = body.get("temperature", 0.7)

        handler = track_stream(request.app.state.monitor, StreamHandler(model))
        chunks = request.app.state.engine.stream_text(
            messages, model=body.get("model"), max_tokens=max_tokens, temperature=temperature,
        )
        completion_id = f"speedometer-{int(time.time() * 1000)}"

        async def event_generator():
            async for text in handler.relay(chunks):
                chunk = {
                    "id": completion_id,
                    "object": "chat.completion.chunk",
                    "model": model,
                    "choices": [{"index": 0, "delta": {"content": text}, "finish_reason": None}],
                }
                yield f"data: {json.dumps(chunk)}\n\n"
            yield "data: [DONE]\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={"X-Speedometer-Model": model},
        )

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8080)
