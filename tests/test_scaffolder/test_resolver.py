"""Unit tests for target version resolution (rn_bootstrap.scaffolder.resolver)."""

from __future__ import annotations

import httpx
import pytest

from rn_bootstrap.config import Config
from rn_bootstrap.errors import VersionResolutionError
from rn_bootstrap.scaffolder.resolver import fetch_latest_version, resolve_target_version


def _transport(status: int = 200, payload: dict | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/react-native/latest"
        return httpx.Response(status, json=payload if payload is not None else {})

    return httpx.MockTransport(handler)


def _unreachable() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


class TestFetchLatestVersion:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_reads_version(self):
        version = await fetch_latest_version(
            "https://registry.npmjs.org/", transport=_transport(payload={"version": "0.59.10"})
        )
        assert version == "0.59.10"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_error(self):
        with pytest.raises(httpx.HTTPStatusError):
            await fetch_latest_version("https://registry.npmjs.org", transport=_transport(503))

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_version(self):
        with pytest.raises(ValueError):
            await fetch_latest_version("https://registry.npmjs.org", transport=_transport())


class TestResolveTargetVersion:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_explicit_version_wins(self, fake_runner):
        runner = fake_runner()
        version = await resolve_target_version(
            " 0.58.6 ", Config(), runner, transport=_unreachable()
        )
        assert version == "0.58.6"
        assert runner.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_registry_latest(self, fake_runner):
        runner = fake_runner()
        version = await resolve_target_version(
            None, Config(), runner, transport=_transport(payload={"version": "0.59.9"})
        )
        assert version == "0.59.9"
        assert runner.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_falls_back_to_npm(self, fake_runner):
        runner = fake_runner()
        version = await resolve_target_version(None, Config(), runner, transport=_unreachable())
        assert version == "0.59.10"
        assert runner.calls == [("captured", "npm view react-native version", None)]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_both_sources_fail(self, fake_runner):
        with pytest.raises(VersionResolutionError):
            await resolve_target_version(
                None, Config(), fake_runner(probes={}), transport=_unreachable()
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_npm_prints_garbage(self, fake_runner):
        runner = fake_runner(probes={"npm view": (0, "undefined", "")})
        with pytest.raises(VersionResolutionError, match="printed no version"):
            await resolve_target_version(None, Config(), runner, transport=_unreachable())
