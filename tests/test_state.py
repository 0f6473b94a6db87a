import pytest

from bridge_tracker.errors import ServiceError, ServiceErrorCode
from bridge_tracker.models import (
    BundleState,
    DestinationChainInfo,
    FinalityChain,
    FinalityCounter,
    TransferStage,
)
from bridge_tracker.state import check_progress, parse_bundle_state, resolve_state
from bridge_tracker.transformers import source_info_from_relay

from factories import make_record, relay_source_info


@pytest.fixture()
def source_info(settings):
    return source_info_from_relay(relay_source_info(ethBlockNumber=100), settings)


@pytest.fixture()
def destination_info():
    return DestinationChainInfo(tx_hash="3c" * 32, block_number=1000, block_hash="ff" * 32)


def test_source_submitted_counts_source_confirmations(settings, source_info):
    state = resolve_state(BundleState.NOT_FOUND, source_info, None, 110, None, settings)

    assert state.stage == TransferStage.SOURCE_SUBMITTED
    assert state.finality.chain == FinalityChain.SOURCE_CHAIN
    assert state.finality.count == 10
    assert state.finality.target == 64
    assert state.finality.remaining == 54


def test_source_submitted_without_tip_is_undefined(settings, source_info):
    state = resolve_state("NOT_FOUND", source_info, None, None, None, settings)

    assert state.stage == TransferStage.SOURCE_SUBMITTED
    assert state.finality == FinalityCounter.undefined()


def test_stored_has_no_finality_counter(settings, source_info):
    state = resolve_state(BundleState.STORED, source_info, None, 500, 500, settings)

    assert state.stage == TransferStage.RELAY_PROCESSING
    assert state.finality.chain == FinalityChain.UNDEFINED
    assert state.finality.count is None


def test_destination_submitted_counts_destination_confirmations(
    settings, source_info, destination_info
):
    state = resolve_state(
        BundleState.SUBMITTED, source_info, destination_info, None, 1090, settings
    )

    assert state.stage == TransferStage.DESTINATION_SUBMITTED
    assert state.finality.chain == FinalityChain.DESTINATION_CHAIN
    assert state.finality.count == 90
    assert state.finality.remaining == 0


def test_destination_past_threshold_is_finalized(settings, source_info, destination_info):
    state = resolve_state(
        BundleState.SUBMITTED, source_info, destination_info, None, 1095, settings
    )

    assert state.stage == TransferStage.FINALIZED
    assert state.finality.chain == FinalityChain.UNDEFINED


def test_destination_submitted_without_tip_is_undefined(
    settings, source_info, destination_info
):
    state = resolve_state(
        BundleState.SUBMITTED, source_info, destination_info, None, None, settings
    )

    assert state.stage == TransferStage.DESTINATION_SUBMITTED
    assert state.finality.chain == FinalityChain.UNDEFINED


def test_unknown_bundle_state(settings, source_info):
    state = resolve_state("BURNED", source_info, None, 1, 1, settings)

    assert state.stage is None
    assert parse_bundle_state("BURNED") is None
    assert parse_bundle_state("STORED") == BundleState.STORED


def test_finality_counter_tag_must_match_count():
    with pytest.raises(ValueError):
        FinalityCounter(chain=FinalityChain.SOURCE_CHAIN)
    with pytest.raises(ValueError):
        FinalityCounter(count=3)


def test_check_progress_allows_forward_and_equal_stages():
    check_progress(None, make_record(TransferStage.SOURCE_SUBMITTED))
    check_progress(
        make_record(TransferStage.SOURCE_SUBMITTED),
        make_record(TransferStage.RELAY_PROCESSING),
    )
    check_progress(
        make_record(TransferStage.RELAY_PROCESSING),
        make_record(TransferStage.RELAY_PROCESSING),
    )


def test_check_progress_rejects_regression():
    with pytest.raises(ServiceError) as excinfo:
        check_progress(
            make_record(TransferStage.DESTINATION_SUBMITTED),
            make_record(TransferStage.SOURCE_SUBMITTED),
        )
    assert excinfo.value.code == ServiceErrorCode.RELAY_STATE_REGRESSION
