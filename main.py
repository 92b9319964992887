"""
SaaSPE backend health probe.

Checks the configured API_BASE_URL once through the resilient client and
exits non-zero when the backend is not healthy.
"""

import asyncio
import sys

from loguru import logger

from saaspe.api.health import HealthApi
from saaspe.services import ApiError, handle_api_error
from saaspe.services.client import close_api_client, get_api_client


async def main() -> int:
    """Run the probe and return the process exit code."""
    client = get_api_client()
    logger.info(f"Probing backend at {client.base_url}...")

    try:
        health = await HealthApi(client).get_detailed_health()
        logger.info(
            f"Backend {health.status}: version={health.version} "
            f"env={health.environment} uptime={health.uptime:.0f}s "
            f"db_connected={health.database.connected}"
        )
        return 0 if health.status != "unhealthy" else 1

    except ApiError as e:
        logger.error(f"Health check failed: {handle_api_error(e)}")
        return 1

    finally:
        logger.info(f"Circuit breaker state: {client.get_circuit_breaker_state().value}")
        await close_api_client()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
