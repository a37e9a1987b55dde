"""Tests for the generic params decoder."""

import pytest
from gateway.model import TaskForCreate, TaskForUpdate
from gateway.params import (
    DataResult,
    ParamsDecodeError,
    ParamsForCreate,
    ParamsForUpdate,
    ParamsIded,
    decode_params,
)


class TestParamsIded:
    def test_valid(self):
        assert decode_params(ParamsIded, {"id": 7}).id == 7

    def test_missing_id(self):
        with pytest.raises(ParamsDecodeError) as exc_info:
            decode_params(ParamsIded, {})
        assert exc_info.value.errors[0]["type"] == "missing"

    @pytest.mark.parametrize("bad", ["7", 7.0, True, None])
    def test_id_must_be_integer(self, bad):
        with pytest.raises(ParamsDecodeError):
            decode_params(ParamsIded, {"id": bad})

    def test_extra_fields_ignored(self):
        params = decode_params(ParamsIded, {"id": 1, "future_field": "x"})
        assert params.id == 1
        assert not hasattr(params, "future_field")

    def test_not_an_object(self):
        with pytest.raises(ParamsDecodeError):
            decode_params(ParamsIded, [1])


class TestParamsForCreate:
    def test_valid(self):
        params = decode_params(ParamsForCreate[TaskForCreate], {"data": {"title": "x"}})
        assert isinstance(params.data, TaskForCreate)
        assert params.data.title == "x"

    def test_missing_data(self):
        with pytest.raises(ParamsDecodeError):
            decode_params(ParamsForCreate[TaskForCreate], {})

    def test_nested_type_mismatch(self):
        with pytest.raises(ParamsDecodeError):
            decode_params(ParamsForCreate[TaskForCreate], {"data": {"title": 5}})

    def test_nested_extra_fields_ignored(self):
        params = decode_params(
            ParamsForCreate[TaskForCreate], {"data": {"title": "x", "color": "red"}}
        )
        assert params.data.model_dump() == {"title": "x"}


class TestParamsForUpdate:
    def test_valid(self):
        params = decode_params(
            ParamsForUpdate[TaskForUpdate], {"id": 3, "data": {"done": True}}
        )
        assert params.id == 3
        assert params.data.done is True
        assert params.data.title is None

    def test_missing_id(self):
        with pytest.raises(ParamsDecodeError):
            decode_params(ParamsForUpdate[TaskForUpdate], {"data": {}})

    def test_missing_data(self):
        with pytest.raises(ParamsDecodeError):
            decode_params(ParamsForUpdate[TaskForUpdate], {"id": 3})


def test_plain_types_decode_too():
    assert decode_params(list[int], [1, 2]) == [1, 2]
    with pytest.raises(ParamsDecodeError):
        decode_params(list[int], ["a"])


def test_data_result_dumps_payload():
    result = DataResult[list[int]](data=[1, 2])
    assert result.model_dump() == {"data": [1, 2]}
