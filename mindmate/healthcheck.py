"""Provider connectivity check: one tiny prompt per configured model."""

import asyncio
import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass

from mindmate.providers.base import AIProvider

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."
_TIMEOUT_SEC = 15.0


@dataclass
class ProviderHealth:
    name: str
    model: str
    ok: bool
    latency_sec: float
    error: str = ""


async def check_provider(provider: AIProvider) -> ProviderHealth:
    """Ping one provider. Never raises."""
    start = time.monotonic()
    try:
        await asyncio.wait_for(provider.invoke(_PING_PROMPT), timeout=_TIMEOUT_SEC)
    except TimeoutError:
        error = f"No answer within {_TIMEOUT_SEC:.0f}s"
    except Exception as exc:
        error = str(exc) or type(exc).__name__
    else:
        error = ""

    health = ProviderHealth(
        name=provider.name(),
        model=provider.model_string(),
        ok=not error,
        latency_sec=time.monotonic() - start,
        error=error,
    )
    if not health.ok:
        logger.warning("Health check failed for %s: %s", health.name, error)
    return health


async def run_health_checks(providers: Iterable[AIProvider]) -> list[ProviderHealth]:
    """Ping all providers concurrently, in the order given."""
    return list(await asyncio.gather(*(check_provider(p) for p in providers)))
