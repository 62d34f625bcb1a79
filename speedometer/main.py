"""
Token Speedometer - CLI entrypoint.

Usage:
    # Stream one completion from an OpenAI-compatible server
    python -m speedometer.main watch --url http://localhost:8001 --prompt "Tell me a story"

    # Synthetic bursty stream, no server needed
    python -m speedometer.main simulate --tokens 300 --rate 40 --burst 4

    # Dashboard / proxy
    python -m speedometer.main serve --port 8080
"""

import argparse
import asyncio
import random
from collections.abc import AsyncIterator

from .config import load_config
from .monitor.rate_monitor import METRICS_UPDATED, TRACKING_ENDED, RateMonitor
from .monitor.speed import SpeedMetrics
from .streaming.engine import InferenceEngine
from .streaming.handler import StreamHandler, track_stream


def format_summary(metrics: SpeedMetrics) -> str:
    return (
        f"{metrics.total_tokens} tokens in {metrics.elapsed_time:.1f}s | "
        f"avg {metrics.average_speed:.1f} t/s | peak {metrics.peak_speed:.1f} t/s"
    )


async def simulated_stream(tokens: int, rate: float, burst: int, seed: int | None = None) -> AsyncIterator[str]:
    """Yield `tokens` words in irregular bursts averaging `rate` tokens/second."""
    rng = random.Random(seed)
    sent = 0
    while sent < tokens:
        n = min(rng.randint(1, burst), tokens - sent)
        await asyncio.sleep(n / rate * rng.uniform(0.5, 1.5))
        yield "tok " * n
        sent += n


def count_words(text: str) -> int:
    return len(text.split())


async def run_tracked(monitor: RateMonitor, handler: StreamHandler, chunks: AsyncIterator[str]) -> str:
    """Stream chunks through the monitor, printing the status line as it updates."""
    monitor.on(METRICS_UPDATED, lambda m: print(f"  {monitor.display.render()}  ({m.total_tokens} tokens)"))
    monitor.on(TRACKING_ENDED, lambda m: print(f"Done: {format_summary(m)}"))
    track_stream(monitor, handler)
    try:
        return await handler.handle_stream(chunks)
    finally:
        monitor.dispose()


async def watch(args) -> None:
    config = load_config(args.config)
    engine = InferenceEngine(args.url or config.upstream_url)
    monitor = RateMonitor(config=config)
    handler = StreamHandler(args.model or "default")

    print(f"Streaming from {engine.base_url} ...")
    try:
        chunks = engine.stream_text(
            [{"role": "user", "content": args.prompt}],
            model=args.model,
            max_tokens=args.max_tokens,
        )
        await run_tracked(monitor, handler, chunks)
    finally:
        await engine.close()


async def simulate(args) -> None:
    config = load_config(args.config)
    monitor = RateMonitor(config=config)
    handler = StreamHandler("simulated", token_counter=count_words)

    print(f"Simulating {args.tokens} tokens at ~{args.rate} t/s (bursts up to {args.burst})")
    await run_tracked(monitor, handler, simulated_stream(args.tokens, args.rate, args.burst, args.seed))


def serve(args) -> None:
    import uvicorn

    from .dashboard.app import create_app

    uvicorn.run(create_app(load_config(args.config)), host=args.host, port=args.port)


def main():
    parser = argparse.ArgumentParser(description="Token generation speedometer")
    parser.add_argument("--config", default=None, help="YAML config (default: configs/speedometer.yaml)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    watch_parser = subparsers.add_parser("watch", help="Measure a live completion stream")
    watch_parser.add_argument("--url", default=None, help="Upstream base URL")
    watch_parser.add_argument("--prompt", required=True)
    watch_parser.add_argument("--model", default=None)
    watch_parser.add_argument("--max-tokens", type=int, default=512)

    sim_parser = subparsers.add_parser("simulate", help="Measure a synthetic bursty stream")
    sim_parser.add_argument("--tokens", type=int, default=300)
    sim_parser.add_argument("--rate", type=float, default=40.0)
    sim_parser.add_argument("--burst", type=int, default=4)
    sim_parser.add_argument("--seed", type=int, default=None)

    serve_parser = subparsers.add_parser("serve", help="Run the dashboard / proxy")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8080)

    args = parser.parse_args()

    if args.command == "watch":
        asyncio.run(watch(args))
    elif args.command == "simulate":
        asyncio.run(simulate(args))
    elif args.command == "serve":
        serve(args)


if __name__ == "__main__":
    main()
