import json

import pytest
from postgrest import APIError

from fakes import FakeStore
from pharmacy_backend.cli.main import main, parse_order, parse_where
from pharmacy_backend.orm import DataClient


@pytest.fixture
def seeded():
    store = FakeStore(
        {
            "medicines": [
                {"id": 1, "name": "Amoxicillin", "pharmacy_id": 7},
                {"id": 2, "name": "Paracetamol", "pharmacy_id": 7},
                {"id": 3, "name": "Ibuprofen", "pharmacy_id": 8},
            ]
        }
    )
    return store, DataClient(store)


def test_parse_where_coerces_and_nests():
    assert parse_where(["pharmacyId=7", "isActive=true", "branch.name=Main", "price=2.5"]) == {
        "pharmacyId": 7,
        "isActive": True,
        "branch": {"name": "Main"},
        "price": 2.5,
    }
    with pytest.raises(ValueError):
        parse_where(["broken"])


def test_parse_order():
    assert parse_order("createdAt:desc") == {"createdAt": "desc"}
    assert parse_order("id") == {"id": "asc"}
    assert parse_order(None) is None


def test_tables_lists_mapping(capsys):
    assert main(["tables"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["Pharmacy"] == "pharmacies"


def test_count(seeded, capsys):
    _, db = seeded
    assert main(["count", "Medicine", "--where", "pharmacyId=7"], db=db) == 0
    assert json.loads(capsys.readouterr().out) == {"entity": "Medicine", "count": 2}


def test_find_with_paging(seeded, capsys):
    store, db = seeded
    code = main(["find", "Medicine", "--order-by", "id:desc", "--skip", "1", "--take", "1"], db=db)
    assert code == 0
    rows = json.loads(capsys.readouterr().out)
    assert [r["id"] for r in rows] == [2]
    assert ("range", 1, 1) in store.last.calls


def test_get_found_and_missing(seeded, capsys):
    _, db = seeded
    assert main(["get", "Medicine", "--id", "3"], db=db) == 0
    assert json.loads(capsys.readouterr().out)["name"] == "Ibuprofen"
    assert main(["get", "Medicine", "--id", "99"], db=db) == 1


def test_unknown_entity_is_usage_error(seeded):
    _, db = seeded
    assert main(["count", "Invoice"], db=db) == 2


def test_store_error_exit_code(seeded):
    store, db = seeded
    store.fail_with = APIError({"message": "boom", "code": "XX000", "hint": None, "details": None})
    assert main(["find", "Medicine"], db=db) == 1


def test_programming_errors_are_not_reported_as_usage_errors(seeded, monkeypatch):
    _, db = seeded

    def broken_count(where=None):
        raise TypeError("count() got an unexpected keyword argument")

    monkeypatch.setattr(db["Medicine"], "count", broken_count)
    with pytest.raises(TypeError):
        main(["count", "Medicine"], db=db)
