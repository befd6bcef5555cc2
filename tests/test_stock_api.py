from sqlalchemy import func, select

from stockledger.core.config import settings
from stockledger.models.inventory import CountLine, CountSession, Movement, StockLevel, Transfer


def _move(client, action: str, barcode, qty, location):
    return client.post(
        "/stock/move",
        json={"action": action, "barcode": barcode, "qty": qty, "location": location},
    )


def _count_rows(session_local, model) -> int:
    with session_local() as db:
        return int(db.execute(select(func.count()).select_from(model)).scalar_one())


def _levels(client) -> dict[tuple[str, str], int]:
    res = client.get("/stock/levels")
    assert res.status_code == 200, res.text
    return {(row["barcode"], row["location"]): row["qty"] for row in res.json()["rows"]}


def test_stock_move_in_and_out_returns_level(test_context):
    client, _ = test_context

    res = _move(client, "IN", "123", 10, "A")
    assert res.status_code == 200, res.text
    assert res.json() == {"ok": True, "barcode": "123", "location": "A", "level": 10}

    res = _move(client, "OUT", "123", "3", "A")
    assert res.status_code == 200, res.text
    assert res.json()["level"] == 7


def test_stock_move_out_on_absent_row_floors_at_zero(test_context):
    client, _ = test_context

    res = _move(client, "OUT", "999", 5, "Z")

    assert res.status_code == 200, res.text
    assert res.json()["level"] == 0
    assert _levels(client) == {("999", "Z"): 0}


def test_stock_move_rejects_bad_input_with_error_envelope(test_context):
    client, session_local = test_context

    res = _move(client, "MAYBE", "123", 1, "A")
    assert res.status_code == 400
    body = res.json()["error"]
    assert body["code"] == "bad_request"
    assert body["message"] == "action must be IN or OUT"
    assert body["path"] == "/stock/move"
    assert res.headers["X-Request-ID"] == body["request_id"]

    res = _move(client, "IN", "123", 0, "A")
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "qty must be positive integer"

    res = _move(client, "IN", "123", 2.5, "A")
    assert res.status_code == 400

    res = client.post("/stock/move", json={"action": "IN", "qty": 1, "location": "A"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Missing field: barcode"

    assert _count_rows(session_local, Movement) == 0
    assert _count_rows(session_local, StockLevel) == 0


def test_stock_move_rejects_structurally_invalid_payload(test_context):
    client, _ = test_context

    res = client.post("/stock/move", json={"action": ["IN"], "barcode": "1", "qty": 1, "location": "A"})

    assert res.status_code == 422
    assert res.json()["error"]["code"] == "validation_error"
    assert res.json()["error"]["details"]


def test_stock_move_rejects_boolean_and_oversized_qty(test_context):
    client, session_local = test_context

    for qty in (True, 10**20, 2**31):
        res = _move(client, "IN", "123", qty, "A")
        assert res.status_code == 400, res.text
        assert res.json()["error"]["code"] == "bad_request"
        assert res.json()["error"]["message"] == "qty must be positive integer"

    res = client.post("/stock/count", json={"location": "A", "lines": [{"barcode": "123", "qty": False}]})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "invalid line item at index 0"

    assert _count_rows(session_local, Movement) == 0
    assert _count_rows(session_local, CountSession) == 0
    assert _count_rows(session_local, StockLevel) == 0


def test_stock_operations_accept_numeric_barcodes_and_locations(test_context):
    client, _ = test_context
    settings.apply_count = True

    res = _move(client, "IN", 8690000000017, 10, 7)
    assert res.status_code == 200, res.text
    assert res.json() == {"ok": True, "barcode": "8690000000017", "location": "7", "level": 10}

    res = client.post(
        "/stock/transfer",
        json={"barcode": 8690000000017, "qty": 4, "fromLocation": 7, "toLocation": "B"},
    )
    assert res.status_code == 200, res.text
    assert (res.json()["from_level"], res.json()["to_level"]) == (6, 4)

    res = client.post("/stock/count", json={"location": 7, "lines": [{"barcode": 8690000000017, "qty": 5}]})
    assert res.status_code == 200, res.text
    assert res.json()["lines"] == [{"barcode": "8690000000017", "qty": 5, "applied_delta": -1}]

    assert _levels(client) == {("8690000000017", "7"): 5, ("8690000000017", "B"): 4}


def test_stock_move_rejects_overlong_identifiers_with_bad_request(test_context):
    client, session_local = test_context

    res = _move(client, "IN", "9" * 129, 1, "A")
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "barcode must be at most 128 characters"

    res = client.post(
        "/stock/transfer",
        json={"barcode": "1", "qty": 1, "fromLocation": "A" * 121, "toLocation": "B"},
    )
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "fromLocation must be at most 120 characters"

    assert _count_rows(session_local, Movement) == 0
    assert _count_rows(session_local, Transfer) == 0


def test_stock_transfer_accepts_camel_case_locations(test_context):
    client, _ = test_context
    _move(client, "IN", "123", 7, "A")

    res = client.post(
        "/stock/transfer",
        json={"barcode": "123", "qty": 5, "fromLocation": "A", "toLocation": "B"},
    )

    assert res.status_code == 200, res.text
    assert res.json() == {
        "ok": True,
        "barcode": "123",
        "from_location": "A",
        "to_location": "B",
        "from_level": 2,
        "to_level": 5,
    }

    res = client.post(
        "/stock/transfer",
        json={"barcode": "123", "qty": 1, "from_location": "B", "to_location": "C"},
    )
    assert res.status_code == 200, res.text
    assert (res.json()["from_level"], res.json()["to_level"]) == (4, 1)


def test_stock_transfer_same_location_is_rejected(test_context):
    client, session_local = test_context
    _move(client, "IN", "123", 7, "A")

    res = client.post(
        "/stock/transfer",
        json={"barcode": "123", "qty": 1, "fromLocation": "A", "toLocation": "A"},
    )

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "fromLocation must differ from toLocation"
    assert _count_rows(session_local, Transfer) == 0
    assert _levels(client) == {("123", "A"): 7}


def test_stock_count_without_policy_records_but_does_not_apply(test_context):
    client, session_local = test_context
    settings.apply_count = False
    _move(client, "IN", "123", 7, "A")

    res = client.post(
        "/stock/count",
        json={"location": "A", "lines": [{"barcode": "123", "qty": 2}]},
    )

    assert res.status_code == 200, res.text
    body = res.json()
    assert body["ok"] is True
    assert body["applied"] is False
    assert body["lines"] == [{"barcode": "123", "qty": 2, "applied_delta": None}]
    assert isinstance(body["count_id"], int)
    assert _levels(client) == {("123", "A"): 7}
    assert _count_rows(session_local, CountLine) == 1


def test_stock_count_with_policy_overwrites_level(test_context):
    client, _ = test_context
    settings.apply_count = True
    _move(client, "IN", "123", 10, "A")
    _move(client, "OUT", "123", 3, "A")
    client.post("/stock/transfer", json={"barcode": "123", "qty": 5, "fromLocation": "A", "toLocation": "B"})

    res = client.post(
        "/stock/count",
        json={"location": "A", "lines": [{"barcode": "123", "qty": 0}]},
    )

    assert res.status_code == 200, res.text
    assert res.json()["applied"] is True
    assert res.json()["lines"][0]["applied_delta"] == -2
    assert _levels(client) == {("123", "A"): 0, ("123", "B"): 5}


def test_stock_count_invalid_line_rolls_back_everything(test_context):
    client, session_local = test_context
    settings.apply_count = True
    _move(client, "IN", "123", 4, "A")

    res = client.post(
        "/stock/count",
        json={
            "location": "A",
            "lines": [{"barcode": "123", "qty": 9}, {"barcode": "456", "qty": -1}],
        },
    )

    assert res.status_code == 400
    assert res.json()["error"]["message"] == "invalid line item at index 1"
    assert _count_rows(session_local, CountSession) == 0
    assert _count_rows(session_local, CountLine) == 0
    assert _levels(client) == {("123", "A"): 4}


def test_stock_count_requires_non_empty_lines(test_context):
    client, _ = test_context

    res = client.post("/stock/count", json={"location": "A", "lines": []})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "lines must be non-empty array"

    res = client.post("/stock/count", json={"location": "A"})
    assert res.status_code == 400
    assert res.json()["error"]["message"] == "Missing field: lines"


def test_stock_levels_are_ordered_by_location_then_barcode(test_context):
    client, _ = test_context
    _move(client, "IN", "b", 1, "Z")
    _move(client, "IN", "b", 2, "A")
    _move(client, "IN", "a", 3, "A")

    rows = client.get("/stock/levels").json()["rows"]

    assert [(row["location"], row["barcode"]) for row in rows] == [("A", "a"), ("A", "b"), ("Z", "b")]


def test_stock_movements_newest_first_and_capped(test_context):
    client, _ = test_context
    original_limit = settings.movements_list_limit
    settings.movements_list_limit = 3
    try:
        for qty in range(1, 6):
            _move(client, "IN", "123", qty, "A")

        res = client.get("/stock/movements")
    finally:
        settings.movements_list_limit = original_limit

    assert res.status_code == 200, res.text
    rows = res.json()["rows"]
    assert [row["qty"] for row in rows] == [5, 4, 3]
    assert rows[0]["action"] == "IN"


def test_stock_transfer_and_count_listings(test_context):
    client, _ = test_context
    settings.apply_count = False
    client.post("/stock/transfer", json={"barcode": "1", "qty": 2, "fromLocation": "A", "toLocation": "B"})
    count_id = client.post(
        "/stock/count",
        json={"location": "B", "lines": [{"barcode": "1", "qty": 2}, {"barcode": "2", "qty": 0}]},
    ).json()["count_id"]

    transfers = client.get("/stock/transfers").json()["rows"]
    assert [(row["from_location"], row["to_location"], row["qty"]) for row in transfers] == [("A", "B", 2)]

    counts = client.get("/stock/counts").json()["rows"]
    assert [(row["id"], row["location"], row["lines_count"]) for row in counts] == [(count_id, "B", 2)]

    detail = client.get(f"/stock/counts/{count_id}")
    assert detail.status_code == 200, detail.text
    assert [line["barcode"] for line in detail.json()["lines"]] == ["1", "2"]

    missing = client.get("/stock/counts/9999")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"
