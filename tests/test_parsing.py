from datetime import date, datetime

import pytest

from payroll_api.common.parsing import parse_date, parse_id_list


def test_id_list_accepts_ints_and_digit_strings():
    assert parse_id_list([1, "2", " 3 "]) == [1, 2, 3]
    assert parse_id_list([]) == []
    assert parse_id_list(None) is None


@pytest.mark.parametrize("raw", [[1.5], [1.0], ["1.5"], [True], ["abc"], [None], ["-1"], "1,2", {"id": 1}])
def test_id_list_rejects_anything_but_whole_ids(raw):
    with pytest.raises(ValueError):
        parse_id_list(raw)


def test_parse_date_forms():
    assert parse_date("2024-01-31") == date(2024, 1, 31)
    assert parse_date("2024-01-31T10:00:00") == date(2024, 1, 31)
    assert parse_date(datetime(2024, 1, 31, 8)) == date(2024, 1, 31)
    assert parse_date("31/01/2024") is None
    assert parse_date("") is None
