# tests/integration/conftest.py — v1
"""Shared fixtures for integration tests.

Container lifecycle:
- session scope: the Redis container starts once per pytest session
- function scope: fresh key namespace per test for isolation

Containers are reached through their bridge network IP and internal port,
which also works from inside a devcontainer with docker-outside-of-docker.
Tests needing Docker are skipped when no daemon is reachable.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest

logger = logging.getLogger(__name__)


def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info("Container %s IP: %s (network: %s)", wrapped.short_id, ip, net_name)
                    return ip
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  REDIS CONTAINER — session scope (bridge IP)
# =====================================================================

REDIS_IMAGE = "redis:7-alpine"
REDIS_INTERNAL_PORT = 6379


@pytest.fixture(scope="session")
def redis_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=30)

    ip = _get_container_bridge_ip(container)
    logger.info("Redis ready at %s:%d", ip, REDIS_INTERNAL_PORT)
    yield {"host": ip, "port": REDIS_INTERNAL_PORT}
    container.stop()


@pytest.fixture(scope="session")
def redis_url(redis_container) -> str:
    c = redis_container
    return f"redis://{c['host']}:{c['port']}/0"


@pytest.fixture
def unique_namespace() -> str:
    return f"test_{uuid.uuid4().hex[:8]}"
