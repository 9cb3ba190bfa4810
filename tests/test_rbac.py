from datetime import date

import pytest

from conftest import ADMIN, CLIENT, OTHER

LOGIN = "/login"
DENIED = "/access-denied"


@pytest.fixture
def seeded(client, login):
    """A product and a budget created by the administrator, then logged out."""
    login(ADMIN)
    product = client.post("/products", json={"description": "Widget", "price": "10.00"}).json()
    budget = client.post("/budgets", json={"recipient_name": "Acme", "creation_date": date.today().isoformat()}).json()
    client.get("/logout")
    return {"product": product["id"], "budget": budget["id"]}


def _call(client, operation, ids):
    today = date.today().isoformat()
    if operation == "list":
        return client.get("/budgets")
    if operation == "detail":
        return client.get(f"/budgets/{ids['budget']}")
    if operation == "create":
        return client.post("/budgets", json={"recipient_name": "New", "creation_date": today})
    if operation == "edit":
        return client.put(f"/budgets/{ids['budget']}", json={"recipient_name": "Edited", "creation_date": today})
    if operation == "delete":
        return client.delete(f"/budgets/{ids['budget']}")
    if operation == "add_line":
        return client.post(f"/budgets/{ids['budget']}/lines", json={"product_id": ids["product"], "quantity": 1})
    raise AssertionError(operation)


MATRIX = [
    # operation, anonymous, Client, Administrator (None = allowed)
    ("list", LOGIN, None, None),
    ("detail", LOGIN, None, None),
    ("create", LOGIN, DENIED, None),
    ("edit", LOGIN, DENIED, None),
    ("add_line", LOGIN, DENIED, None),
    ("delete", LOGIN, DENIED, None),
]


def _assert_outcome(response, expected):
    if expected is None:
        assert response.status_code in (200, 201), response.text
    else:
        assert response.status_code == 303
        assert response.headers["location"] == expected


@pytest.mark.parametrize("operation,anonymous,client_role,admin", MATRIX)
def test_budget_authorization_matrix(client, login, seeded, operation, anonymous, client_role, admin):
    _assert_outcome(_call(client, operation, seeded), anonymous)

    login(CLIENT)
    _assert_outcome(_call(client, operation, seeded), client_role)
    client.get("/logout")

    login(ADMIN)
    _assert_outcome(_call(client, operation, seeded), admin)


def test_denied_mutation_leaves_store_untouched(client, login, seeded):
    login(CLIENT)
    assert _call(client, "delete", seeded).status_code == 303
    assert _call(client, "edit", seeded).status_code == 303
    detail = client.get(f"/budgets/{seeded['budget']}").json()
    assert detail["recipient_name"] == "Acme"


def test_catalog_is_admin_only(client, login, seeded):
    pid = seeded["product"]
    requests = [
        lambda: client.get("/products"),
        lambda: client.get(f"/products/{pid}"),
        lambda: client.post("/products", json={"description": "x", "price": "1.00"}),
        lambda: client.put(f"/products/{pid}", json={"description": "x", "price": "1.00"}),
        lambda: client.delete(f"/products/{pid}"),
    ]
    for make in requests:
        _assert_outcome(make(), LOGIN)

    login(CLIENT)
    for make in requests:
        _assert_outcome(make(), DENIED)
    client.get("/logout")

    login(ADMIN)
    for make in requests:
        _assert_outcome(make(), None)


def test_unknown_role_is_sent_to_login_for_reads(client, login, seeded):
    login(OTHER)
    _assert_outcome(_call(client, "list", seeded), LOGIN)
    _assert_outcome(_call(client, "create", seeded), DENIED)


def test_denial_happens_before_body_validation(client):
    # an anonymous caller with a malformed body is redirected, not told about the body
    r = client.post("/budgets", json={"recipient_name": 12})
    assert r.status_code == 303
    assert r.headers["location"] == LOGIN


def test_access_denied_page(client):
    r = client.get(DENIED)
    assert r.status_code == 403
