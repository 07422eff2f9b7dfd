"""Resolution of the target React Native version.

An explicit ``--version`` wins.  Otherwise the ``latest`` dist-tag is read
from the npm registry over HTTP; if the registry cannot be reached the
locally installed ``npm`` is asked instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from rn_bootstrap.errors import ProcessFailure, VersionResolutionError
from rn_bootstrap.gate.probe import extract_version
from rn_bootstrap.utils import print_warning

if TYPE_CHECKING:
    from rn_bootstrap.config import Config
    from rn_bootstrap.runner import ProcessRunner

PACKAGE_NAME = "react-native"


async def fetch_latest_version(
    registry_url: str,
    timeout: int = 15,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Return ``dist-tags.latest`` of react-native from *registry_url*.

    Raises:
        httpx.HTTPError: On connection problems or a non-2xx response.
        ValueError: If the response carries no version.
    """
    async with httpx.AsyncClient(
        base_url=registry_url.rstrip("/"),
        timeout=httpx.Timeout(timeout, connect=5.0),
        transport=transport,
    ) as client:
        response = await client.get(f"/{PACKAGE_NAME}/latest")
        response.raise_for_status()
        version = response.json().get("version")
    if not version:
        raise ValueError(f"npm registry returned no version for {PACKAGE_NAME}")
    return str(version)


async def resolve_target_version(
    requested: str | None,
    config: Config,
    runner: ProcessRunner,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Return the framework version the project will be generated with.

    Raises:
        VersionResolutionError: If no version was requested and neither the
            registry nor ``npm view`` produced one.
    """
    if requested and requested.strip():
        return requested.strip()

    try:
        return await fetch_latest_version(config.npm_registry_url, config.http_timeout, transport)
    except (httpx.HTTPError, ValueError) as exc:
        print_warning(f"  Could not query {config.npm_registry_url} ({exc}); asking npm instead")

    try:
        output = await runner.run_captured(f"npm view {PACKAGE_NAME} version")
    except ProcessFailure as exc:
        raise VersionResolutionError(
            f"Cannot resolve the latest {PACKAGE_NAME} version: {exc}"
        ) from exc

    version = extract_version(output)
    if version is None:
        raise VersionResolutionError(
            f"npm view {PACKAGE_NAME} version printed no version: {output!r}"
        )
    return version
