from dataclasses import dataclass, field
from datetime import datetime, timezone

import pytest
from pydantic import BaseModel, Field

from fluxq.core.errors import MappingError
from fluxq.core.mapper import RecordMapper
from fluxq.core.tables import FluxRecord

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _record() -> FluxRecord:
    return FluxRecord(
        table=0,
        values={"result": "_result", "_time": T0, "location": "coyote_creek", "_value": 8.1},
    )


class WaterLevel(BaseModel):
    location: str
    time: datetime = Field(alias="_time")
    level: float = Field(alias="_value")


@dataclass
class Reading:
    location: str
    value: float = field(metadata={"column": "_value"})
    unit: str = "ft"


def test_maps_to_pydantic_model_via_aliases() -> None:
    m = RecordMapper().to_model(_record(), WaterLevel)
    assert m == WaterLevel(location="coyote_creek", _time=T0, _value=8.1)


def test_maps_to_dataclass_via_column_metadata() -> None:
    r = RecordMapper().to_model(_record(), Reading)
    assert r == Reading(location="coyote_creek", value=8.1)


def test_dataclass_missing_required_column_raises() -> None:
    rec = FluxRecord(table=0, values={"location": "x"})
    with pytest.raises(MappingError):
        RecordMapper().to_model(rec, Reading)


def test_registered_decoder_takes_precedence() -> None:
    mapper = RecordMapper()

    @mapper.register(WaterLevel)
    def _decode(record: FluxRecord) -> WaterLevel:
        return WaterLevel(location=record["location"].upper(), _time=T0, _value=0.0)

    assert mapper.is_registered(WaterLevel)
    assert mapper.to_model(_record(), WaterLevel).location == "COYOTE_CREEK"


def test_register_function_form() -> None:
    mapper = RecordMapper()
    mapper.register(tuple, lambda r: r.row)
    assert mapper.to_model(_record(), tuple) == ("_result", T0, "coyote_creek", 8.1)


def test_unsupported_target_raises() -> None:
    with pytest.raises(MappingError):
        RecordMapper().to_model(_record(), dict)
