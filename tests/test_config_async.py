"""Tests for asynchronous building of a Config."""

import asyncio as _asyncio
import pathlib as _pathlib
import typing as _typing

import pytest as _pytest

import strata.config as config
import strata.errors as errors
import strata.sources as sources
import strata.value as value

WriteConfig = _typing.Callable[[str, str], _pathlib.Path]


class DelayedSource(sources.AsyncSource):
    """Async source that sleeps before answering and records when it finished."""

    def __init__(
        self,
        data: dict[str, _typing.Any],
        delay: float,
        finished: list[str],
        label: str,
    ) -> None:
        super().__init__(origin=label)
        self.data = data
        self.delay = delay
        self.finished = finished

    async def collect(self) -> value.Value:
        await _asyncio.sleep(self.delay)
        self.finished.append(str(self.origin))
        return value.Value.from_python(self.data, self.origin)


class BlockingSource(sources.AsyncSource):
    """Async source that, once armed, waits until released."""

    def __init__(self) -> None:
        super().__init__(origin="blocking")
        self.armed = False
        self.started = _asyncio.Event()
        self.release = _asyncio.Event()

    async def collect(self) -> value.Value:
        if self.armed:
            self.started.set()
            await self.release.wait()
            return value.Value.from_python({"k": "new"}, self.origin)
        return value.Value.from_python({"k": "old"}, self.origin)


class TestBuildAsync:
    """Sequential collection in registration order."""

    @_pytest.mark.asyncio
    async def test_registration_order(self) -> None:
        """A slow early source still finishes first and loses to later ones."""
        finished: list[str] = []
        cfg = (
            config.Config()
            .add_source(DelayedSource({"k": "slow"}, 0.05, finished, "slow"))
            .add_source(DelayedSource({"k": "fast"}, 0.0, finished, "fast"))
        )
        await cfg.build_async()
        assert finished == ["slow", "fast"]
        assert cfg.get_string("k") == "fast"

    @_pytest.mark.asyncio
    async def test_mixes_sync_and_async(self, write_config: WriteConfig) -> None:
        write_config("app.yaml", "a: 1\nb: 1\n")
        cfg = (
            config.Config()
            .add_source(sources.AsyncFileSource("app"))
            .add_source(sources.MemorySource({"b": 2}))
        )
        await cfg.refresh_async()
        assert cfg.to_dict() == {"a": 1, "b": 2}

    @_pytest.mark.asyncio
    async def test_failure_annotated(self, config_dir: _pathlib.Path) -> None:
        cfg = (
            config.Config()
            .add_source(sources.MemorySource({"a": 1}))
            .add_source(sources.AsyncFileSource("missing.toml"))
        )
        with _pytest.raises(errors.SourceError) as exc_info:
            await cfg.build_async()
        assert exc_info.value.index == 1
        assert not cfg.is_built

    @_pytest.mark.asyncio
    async def test_cancellation_keeps_snapshot(self) -> None:
        blocking = BlockingSource()
        cfg = config.Config().add_source(blocking)
        await cfg.build_async()
        before = cfg.snapshot

        blocking.armed = True
        task = _asyncio.create_task(cfg.refresh_async())
        await blocking.started.wait()
        task.cancel()
        with _pytest.raises(_asyncio.CancelledError):
            await task

        assert cfg.snapshot is before
        assert cfg.get_string("k") == "old"
