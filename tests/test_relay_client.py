import httpx
import pytest

from bridge_tracker.errors import RelayApiError
from bridge_tracker.relay import RelayClient

from factories import TX_HASH, relay_destination_info, relay_source_info

BASE_URL = "https://relay.test/"


def relay(handler) -> RelayClient:
    client = httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))
    return RelayClient(BASE_URL, client=client)


def respond(payload, status=200):
    return lambda request: httpx.Response(status, json=payload)


@pytest.mark.asyncio
async def test_get_batch_queries_by_source_hash():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json={
                "transaction": {
                    "state": "SUBMITTED",
                    "ethInfo": relay_source_info(),
                    "aionInfo": relay_destination_info(),
                },
                "status": {"aion": {"latestBlockNumber": "0x44c"}},
            },
        )

    client = relay(handler)
    batch = await client.get_batch(TX_HASH)
    await client.aclose()

    assert requests[0].url.path == "/batch"
    assert requests[0].url.params["ethTxHash"] == TX_HASH
    assert batch.transaction.state == "SUBMITTED"
    assert batch.transaction.source_info["ethBlockNumber"] == 100
    assert batch.destination_tip == 1100


@pytest.mark.asyncio
async def test_get_batch_tolerates_a_malformed_status_block():
    client = relay(
        respond(
            {
                "transaction": {"state": "NOT_FOUND", "ethInfo": None, "aionInfo": None},
                "status": {"aion": {"latestBlockNumber": "-5"}},
            }
        )
    )
    batch = await client.get_batch(TX_HASH)

    assert batch.status is None
    assert batch.destination_tip is None
    assert batch.transaction.state == "NOT_FOUND"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"transaction": {"state": "STORED"}},
        {"status": {"aion": {}}},
        {"transaction": {"state": 5}, "status": {"aion": {}}},
        {},
    ],
)
async def test_get_batch_requires_transaction_and_status(payload):
    client = relay(respond(payload))
    with pytest.raises(RelayApiError):
        await client.get_batch(TX_HASH)


@pytest.mark.asyncio
async def test_non_200_and_transport_failures_raise():
    with pytest.raises(RelayApiError):
        await relay(respond({"error": "boom"}, status=502)).get_batch(TX_HASH)

    def broken(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RelayApiError):
        await relay(broken).get_status()


@pytest.mark.asyncio
async def test_get_status_parses_hex_and_decimal_numbers():
    client = relay(
        respond(
            {
                "eth": {"finalizedBlockNumber": "0x10", "finalizedBundleId": 3},
                "aion": {
                    "latestBlockNumber": "2000",
                    "finalizedBlockNumber": 1900,
                    "finalizedBundleId": None,
                },
            }
        )
    )
    status = await client.get_status()

    assert status.source.finalized_block_number == 16
    assert status.source.finalized_bundle_id == 3
    assert status.destination.latest_block_number == 2000
    assert status.destination.finalized_bundle_id is None


@pytest.mark.asyncio
async def test_get_status_rejects_negative_numbers():
    client = relay(
        respond({"eth": {"finalizedBlockNumber": -1}, "aion": {"latestBlockNumber": 1}})
    )
    with pytest.raises(RelayApiError):
        await client.get_status()


@pytest.mark.asyncio
async def test_get_transaction():
    client = relay(respond({"state": "STORED", "ethInfo": relay_source_info()}))
    transaction = await client.get_transaction(TX_HASH)

    assert transaction.state == "STORED"
    assert transaction.destination_info is None


# 5 destination coins, in destination base units
FIVE_COINS = format(5 * 10**18, "x")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "requested, expected",
    [
        (5 * 10**8 - 1, True),
        (5 * 10**8, False),
        (5 * 10**8 + 1, False),
        ("0x1dcd64ff", True),
        ("1dcd6500", False),
    ],
)
async def test_is_enough_balance_compares_in_human_units(requested, expected):
    client = relay(respond({"balance": FIVE_COINS}))
    assert await client.is_enough_balance(requested) is expected


@pytest.mark.asyncio
async def test_is_enough_balance_rejects_bad_inputs():
    with pytest.raises(RelayApiError):
        await relay(respond({"other": 1})).is_enough_balance(1)
    with pytest.raises(RelayApiError):
        await relay(respond({"balance": "not hex"})).is_enough_balance(1)
    with pytest.raises(ValueError):
        await relay(respond({"balance": FIVE_COINS})).is_enough_balance("zz")


@pytest.mark.asyncio
async def test_get_batch_leaves_a_missing_state_to_the_caller():
    client = relay(respond({"transaction": {"ethInfo": None}, "status": {"aion": {}}}))
    batch = await client.get_batch(TX_HASH)

    assert batch.transaction.state is None
    assert batch.destination_tip is None
