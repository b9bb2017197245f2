"""Tests for the periodic cache sweeper."""

import asyncio

import pytest

from qrgen.cache.store import RequestMetadata
from qrgen.cache.sweeper import CacheSweeper


@pytest.mark.unit
def test_interval_must_be_positive(store):
    """Non-positive intervals are rejected."""
    with pytest.raises(ValueError):
        CacheSweeper(store, interval=0)


@pytest.mark.unit
def test_run_once(store, clock):
    """A single pass sweeps the store."""
    store.set("qr:a", b"image", RequestMetadata(size="1000x1000", error_correction_level="H"))
    sweeper = CacheSweeper(store)

    assert sweeper.run_once() == 0
    clock.advance(1801)
    assert sweeper.run_once() == 1
    assert sweeper.passes == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_and_stop(store):
    """Sweeper runs in the background until stopped."""
    sweeper = CacheSweeper(store, interval=0.01)

    sweeper.start()
    assert sweeper.running

    await asyncio.sleep(0.05)
    await sweeper.stop()

    assert not sweeper.running
    assert sweeper.passes >= 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_start_is_idempotent(store):
    """Starting twice keeps one task."""
    sweeper = CacheSweeper(store, interval=60)

    sweeper.start()
    task = sweeper._task
    sweeper.start()

    assert sweeper._task is task
    await sweeper.stop()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stop_without_start(store):
    """Stopping an idle sweeper is a no-op."""
    sweeper = CacheSweeper(store)
    await sweeper.stop()
    assert not sweeper.running


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_pass_keeps_running(store, mocker):
    """Errors in a pass do not kill the loop."""
    sweeper = CacheSweeper(store, interval=0.01)
    mocker.patch.object(store, "sweep", side_effect=RuntimeError("boom"))

    sweeper.start()
    await asyncio.sleep(0.05)

    assert sweeper.running
    await sweeper.stop()
