import pytest
from pydantic import ValidationError

from parkwatch.domain.models import ForecastSeries, LotState, Metadata, ParkingLot

from parkapi_fixtures import METADATA


def test_metadata_accepts_name_only_and_object_entries():
    metadata = Metadata.model_validate(METADATA)

    assert metadata.cities["Ingolstadt"].name == "Ingolstadt"
    assert metadata.cities["Ingolstadt"].coords is None
    assert metadata.cities["Dresden"].active_support is True
    assert metadata.display_name("Nowhere") is None


def test_lot_state_parsing():
    base = {"id": "a", "name": "A", "total": 10, "free": 3}
    assert ParkingLot.model_validate({**base, "state": "CLOSED"}).state is LotState.CLOSED
    assert ParkingLot.model_validate({**base, "state": "nodata"}).state is LotState.NODATA
    assert ParkingLot.model_validate({**base, "state": None}).state is LotState.UNKNOWN
    assert ParkingLot.model_validate(base).state is LotState.UNKNOWN


def test_lot_requires_counts():
    with pytest.raises(ValidationError):
        ParkingLot.model_validate({"id": "a", "name": "A", "free": 3})


def test_forecast_rejects_bad_timestamps():
    with pytest.raises(ValidationError):
        ForecastSeries.model_validate({"lot_id": "a", "data": {"yesterday": 3}})


def test_models_are_frozen():
    lot = ParkingLot.model_validate({"id": "a", "name": "A", "total": 10, "free": 3})
    with pytest.raises(ValidationError):
        lot.free = 4
