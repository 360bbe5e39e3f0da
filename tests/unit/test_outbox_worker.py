from __future__ import annotations

import asyncio

import pytest

from score_publisher.domain.value_objects.enums import MessageStatus
from score_publisher.workers.outbox_worker import build_reconciler, reconcile_once
from tests.conftest import make_message, uow_factory_for


@pytest.mark.asyncio
async def test_reconcile_once_uses_a_fresh_unit_of_work(outbox_service, uow, publisher):
    msg = uow.outbox.seed(make_message())

    report = await reconcile_once(outbox_service, uow_factory_for(uow))

    assert report.sent == 1
    assert uow.outbox.current(msg.id).status == MessageStatus.SENT


@pytest.mark.asyncio
async def test_reconciler_sweeps_periodically(outbox_service, uow, publisher):
    uow.outbox.seed(make_message(event_id="E1"))
    reconciler = build_reconciler(outbox_service, uow_factory_for(uow), interval=0.01)

    reconciler.start()
    await asyncio.sleep(0.03)
    uow.outbox.seed(make_message(event_id="E2"))
    await asyncio.sleep(0.03)
    reconciler.cancel()
    await reconciler.wait_inflight()

    assert [key for _, key, _ in publisher.calls] == ["E1", "E2"]
    assert all(m.status == MessageStatus.SENT for m in uow.outbox.all())
