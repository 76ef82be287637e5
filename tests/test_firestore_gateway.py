from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from scan2dine.core.exceptions import BackendError, ConflictError, RecordNotFoundError
from scan2dine.services.gateway.firestore import FirestoreMenuGateway


def _gateway(data=None, exists=True):
    snap = MagicMock(exists=exists, update_time="2024-01-01T00:00:00Z")
    snap.to_dict.return_value = data
    ref = MagicMock()
    ref.get = AsyncMock(return_value=snap)
    ref.update = AsyncMock()
    ref.create = AsyncMock()
    client = MagicMock()
    client.collection.return_value.document.return_value = ref
    return FirestoreMenuGateway(client=client), client, ref


async def test_update_bumps_version_with_precondition():
    gateway, client, ref = _gateway({"name": "Soup", "version": 2})

    await gateway.update_menu_item("i1", {"price": 5.0, "version": 99}, expected_version=2)

    payload = ref.update.await_args.args[0]
    assert payload["price"] == 5.0
    assert payload["version"] == 3
    client.write_option.assert_called_once_with(last_update_time="2024-01-01T00:00:00Z")


async def test_stale_version_is_rejected_before_writing():
    gateway, _, ref = _gateway({"version": 4})

    with pytest.raises(ConflictError):
        await gateway.update_restaurant("r1", {"name": "X"}, expected_version=3)

    ref.update.assert_not_awaited()


async def test_concurrent_write_maps_to_conflict():
    gateway, _, ref = _gateway({"version": 1})
    ref.update.side_effect = google_exceptions.FailedPrecondition("stale")

    with pytest.raises(ConflictError):
        await gateway.update_menu_item("i1", {"name": "X"})


async def test_update_missing_document():
    gateway, _, _ = _gateway(exists=False)
    with pytest.raises(RecordNotFoundError):
        await gateway.update_restaurant("r1", {"name": "X"})


async def test_create_existing_restaurant():
    gateway, _, ref = _gateway()
    ref.create.side_effect = google_exceptions.AlreadyExists("exists")

    with pytest.raises(BackendError) as exc_info:
        await gateway.create_restaurant("r1", {"name": "Chez Nous"})

    assert exc_info.value.code == "already_exists"


async def test_read_failure_raises_backend_error():
    gateway, _, ref = _gateway()
    ref.get.side_effect = google_exceptions.ServiceUnavailable("down")

    with pytest.raises(BackendError):
        await gateway.fetch_restaurant("r1")
    assert await gateway.get_restaurant("r1") is None
