from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from quotedesk import models
from quotedesk.crud import BudgetRepository


def _product(products, description="Widget", price="10.00"):
    return products.add(models.Product(id=0, description=description, price=Decimal(price)))


def _budget(budgets, recipient="Acme", created=None):
    return budgets.add(models.Budget(id=0, recipient_name=recipient, creation_date=created or date.today()))


def test_product_add_assigns_increasing_ids(products):
    first = _product(products, "A")
    second = _product(products, "B")
    assert first.id is not None
    assert second.id > first.id
    assert [p.description for p in products.list_all()] == ["A", "B"]


def test_product_update_and_missing_id(products):
    product = _product(products)
    assert products.update(models.Product(id=product.id, description="Gadget", price=Decimal("12.50")))
    stored = products.get_by_id(product.id)
    assert stored.description == "Gadget"
    assert stored.price == Decimal("12.50")

    assert products.update(models.Product(id=9999, description="x", price=Decimal("1"))) is False


def test_product_remove_is_noop_when_absent(products):
    product_id = _product(products).id
    assert products.remove(product_id) is True
    assert products.get_by_id(product_id) is None
    assert products.remove(product_id) is False


def test_budget_list_returns_headers(budgets):
    _budget(budgets, "Acme")
    _budget(budgets, "Globex")
    listed = budgets.list_all()
    assert [b.recipient_name for b in listed] == ["Acme", "Globex"]


def test_budget_get_by_id_hydrates_lines(budgets, products):
    widget = _product(products, "Widget", "10.00")
    gadget = _product(products, "Gadget", "2.50")
    budget = _budget(budgets)
    budgets.add_line(budget.id, widget.id, 3)
    budgets.add_line(budget.id, gadget.id, 2)

    detail = budgets.get_by_id(budget.id)
    assert detail.recipient_name == "Acme"
    assert [(l.product.description, l.quantity) for l in detail.lines] == [("Widget", 3), ("Gadget", 2)]


def test_budget_get_by_id_missing(budgets):
    assert budgets.get_by_id(12345) is None


def test_budget_update_keeps_lines(budgets, products):
    widget = _product(products)
    budget = _budget(budgets)
    budgets.add_line(budget.id, widget.id, 1)

    assert budgets.update(models.Budget(id=budget.id, recipient_name="Initech", creation_date=date(2024, 1, 2)))
    detail = budgets.get_by_id(budget.id)
    assert detail.recipient_name == "Initech"
    assert detail.creation_date == date(2024, 1, 2)
    assert len(detail.lines) == 1

    assert budgets.update(models.Budget(id=777, recipient_name="x", creation_date=date.today())) is False


def test_budget_remove_deletes_lines_and_is_idempotent(db_session, budgets, products):
    widget = _product(products)
    budget_id = _budget(budgets).id
    budgets.add_line(budget_id, widget.id, 4)

    assert budgets.remove(budget_id) is True
    assert budgets.get_by_id(budget_id) is None
    assert db_session.query(models.BudgetLine).filter_by(budget_id=budget_id).count() == 0
    # second call is a no-op
    assert budgets.remove(budget_id) is False


def test_hydration_drops_lines_of_deleted_products(budgets, products):
    widget = _product(products, "Widget", "10.00")
    doomed = _product(products, "Doomed", "99.00")
    budget = _budget(budgets)
    budgets.add_line(budget.id, widget.id, 3)
    budgets.add_line(budget.id, doomed.id, 5)

    assert products.remove(doomed.id)
    detail = budgets.get_by_id(budget.id)
    assert [l.product.id for l in detail.lines] == [widget.id]


class CountingCatalog:
    def __init__(self, items):
        self.items = items
        self.list_calls = 0

    def list_all(self):
        self.list_calls += 1
        return self.items

    def get_by_id(self, product_id):
        raise AssertionError("hydration must not look products up one by one")


def test_hydration_loads_catalog_once(db_session):
    catalog = CountingCatalog([
        SimpleNamespace(id=1, description="One", price=Decimal("1.00")),
        SimpleNamespace(id=2, description="Two", price=Decimal("2.00")),
    ])
    budgets = BudgetRepository(db_session, catalog=catalog)
    budget = _budget(budgets)
    for product_id in (1, 2, 1, 2, 3):
        budgets.add_line(budget.id, product_id, 1)

    detail = budgets.get_by_id(budget.id)
    assert catalog.list_calls == 1
    # product 3 is unknown to the catalog and is filtered out
    assert [l.product.id for l in detail.lines] == [1, 2, 1, 2]


def test_listing_does_not_consult_catalog(db_session):
    catalog = CountingCatalog([])
    budgets = BudgetRepository(db_session, catalog=catalog)
    _budget(budgets)
    budgets.list_all()
    assert catalog.list_calls == 0


def test_add_line_for_missing_budget_is_integrity_error(budgets, products):
    from pytest import raises
    widget = _product(products)
    with raises(ValueError, match="integrity error"):
        budgets.add_line(4242, widget.id, 1)


def test_deleted_product_id_is_not_reused(budgets, products):
    widget = _product(products, "Widget", "10.00")
    doomed_id = _product(products, "Doomed", "99.00").id
    budget = _budget(budgets)
    budgets.add_line(budget.id, doomed_id, 4)

    assert products.remove(doomed_id)
    fresh = _product(products, "New", "1.00")
    assert fresh.id > doomed_id
    # the old line keeps pointing at the deleted id and stays dropped
    assert budgets.get_by_id(budget.id).lines == []
    assert widget.id < doomed_id


def test_deleted_budget_id_is_not_reused(budgets):
    old_id = _budget(budgets, "Acme").id
    assert budgets.remove(old_id)
    assert _budget(budgets, "Globex").id > old_id


def test_exists(budgets):
    budget_id = _budget(budgets).id
    assert budgets.exists(budget_id)
    assert not budgets.exists(budget_id + 1)
