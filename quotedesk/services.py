"""Validated operations over the catalog and budget stores.

Each operation checks its business rules first and raises
:class:`ValidationFailure` with every field error before touching a store.
Updates of a missing id raise :class:`NotFound`; removals are idempotent.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from . import models, schemas
from .crud import BudgetRepository, ProductRepository, round_amount
from .errors import NotFound, ValidationFailure
from .utils import clean_text

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 250


def check_product(data: schemas.ProductCreate) -> List[schemas.FieldError]:
    errors = []
    if data.description is not None and len(data.description) > DESCRIPTION_MAX_LENGTH:
        errors.append(schemas.FieldError(
            field="description",
            message=f"description cannot exceed {DESCRIPTION_MAX_LENGTH} characters",
        ))
    # checked after rounding so nothing positive is stored as 0.00
    if data.price is None or round_amount(Decimal(data.price)) <= 0:
        errors.append(schemas.FieldError(field="price", message="price must be a positive value"))
    return errors


def check_budget(data: schemas.BudgetCreate, today: Optional[date] = None) -> List[schemas.FieldError]:
    today = today or date.today()
    errors = []
    # validated as it will be stored: markup alone cleans down to ""
    if not clean_text(data.recipient_name):
        errors.append(schemas.FieldError(field="recipient_name", message="recipient name is required"))
    if data.creation_date is None:
        errors.append(schemas.FieldError(field="creation_date", message="creation date is required"))
    elif data.creation_date > today:
        errors.append(schemas.FieldError(field="creation_date", message="creation date cannot be in the future"))
    return errors


def check_line(data: schemas.BudgetLineCreate, products: ProductRepository) -> List[schemas.FieldError]:
    errors = []
    if not data.product_id or products.get_by_id(data.product_id) is None:
        errors.append(schemas.FieldError(field="product_id", message="a product must be selected"))
    if data.quantity is None or data.quantity <= 0:
        errors.append(schemas.FieldError(field="quantity", message="quantity must be greater than zero"))
    return errors


def _raise_if_any(errors: List[schemas.FieldError]) -> None:
    if errors:
        raise ValidationFailure(errors)


def _product_model(data: schemas.ProductCreate, product_id: int = 0) -> models.Product:
    return models.Product(
        id=product_id,
        description=clean_text(data.description),
        price=round_amount(Decimal(data.price)),
    )


def _budget_model(data: schemas.BudgetCreate, budget_id: int = 0) -> models.Budget:
    return models.Budget(
        id=budget_id,
        recipient_name=clean_text(data.recipient_name),
        creation_date=data.creation_date,
    )


# -------------------- Catalog --------------------

def get_product(products: ProductRepository, product_id: int) -> models.Product:
    product = products.get_by_id(product_id)
    if product is None:
        raise NotFound("product", product_id)
    return product


def create_product(products: ProductRepository, data: schemas.ProductCreate) -> models.Product:
    _raise_if_any(check_product(data))
    created = products.add(_product_model(data))
    logger.info("product %s created", created.id)
    return created


def update_product(products: ProductRepository, product_id: int, data: schemas.ProductCreate) -> models.Product:
    _raise_if_any(check_product(data))
    if not products.update(_product_model(data, product_id)):
        raise NotFound("product", product_id)
    logger.info("product %s updated", product_id)
    return products.get_by_id(product_id)


def remove_product(products: ProductRepository, product_id: int) -> bool:
    removed = products.remove(product_id)
    if removed:
        logger.info("product %s removed", product_id)
    return removed


# -------------------- Budgets --------------------

def get_budget(budgets: BudgetRepository, budget_id: int) -> schemas.BudgetDetail:
    budget = budgets.get_by_id(budget_id)
    if budget is None:
        raise NotFound("budget", budget_id)
    return budget


def create_budget(budgets: BudgetRepository, data: schemas.BudgetCreate, today: Optional[date] = None) -> models.Budget:
    _raise_if_any(check_budget(data, today))
    created = budgets.add(_budget_model(data))
    logger.info("budget %s created for %r", created.id, created.recipient_name)
    return created


def update_budget(budgets: BudgetRepository, budget_id: int, data: schemas.BudgetCreate, today: Optional[date] = None) -> schemas.BudgetDetail:
    _raise_if_any(check_budget(data, today))
    if not budgets.update(_budget_model(data, budget_id)):
        raise NotFound("budget", budget_id)
    logger.info("budget %s updated", budget_id)
    return budgets.get_by_id(budget_id)


def remove_budget(budgets: BudgetRepository, budget_id: int) -> bool:
    removed = budgets.remove(budget_id)
    if removed:
        logger.info("budget %s removed", budget_id)
    return removed


def add_line(budgets: BudgetRepository, budget_id: int, data: schemas.BudgetLineCreate) -> schemas.BudgetDetail:
    if not budgets.exists(budget_id):
        raise NotFound("budget", budget_id)
    _raise_if_any(check_line(data, budgets.catalog))
    try:
        line = budgets.add_line(budget_id, data.product_id, data.quantity)
    except ValueError as e:
        # budget deleted between the existence check and the insert
        raise NotFound("budget", budget_id) from e
    logger.info("budget %s: line %s added (product %s x %s)", budget_id, line.id, data.product_id, data.quantity)
    return budgets.get_by_id(budget_id)
