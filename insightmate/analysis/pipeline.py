import asyncio
import math
from typing import Awaitable, Callable, Sequence, TypeVar

import structlog

from insightmate.analysis.results import ModelOutput, decode_model_output
from insightmate.llm.client import InferenceClient

logger = structlog.get_logger()

T = TypeVar("T")
R = TypeVar("R")
M = TypeVar("M", bound=ModelOutput)


def chunked(items: Sequence[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive batches of at most ``size``."""
    if size < 1:
        raise ValueError("batch size must be positive")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


def truncate(text: str, budget: int) -> str:
    return text[:budget]


def round_half_up(value: float, ndigits: int = 0) -> float | int:
    """Round halves towards positive infinity, so -0.5 becomes 0 and 0.5 becomes 1."""
    scale = 10 ** ndigits
    rounded = math.floor(value * scale + 0.5)
    return rounded if ndigits == 0 else rounded / scale


def percentage(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(part * 100 / total)


async def ask_model(
    inference: InferenceClient,
    system_prompt: str,
    user_prompt: str,
    schema: type[M],
    fallback: Callable[[], M],
    max_tokens: int = 1024,
) -> M:
    """One inference call decoded into ``schema``.

    Never raises: backend errors, unparseable output and schema mismatches
    all produce ``fallback()``.
    """
    try:
        raw = await inference.complete(system_prompt, user_prompt, max_tokens=max_tokens)
    except Exception as exc:
        logger.warning("inference_call_failed", schema=schema.__name__, error=str(exc))
        return fallback()

    result = decode_model_output(raw, schema, fallback)
    if result.is_fallback:
        logger.warning("model_output_fallback", schema=schema.__name__)
    return result


async def map_batches(
    batches: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: int = 1,
) -> list[R]:
    """Run ``worker`` over every batch, at most ``concurrency`` at a time.

    Results come back in batch order regardless of completion order.
    """
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run(batch: T) -> R:
        async with semaphore:
            return await worker(batch)

    return list(await asyncio.gather(*(run(batch) for batch in batches)))
