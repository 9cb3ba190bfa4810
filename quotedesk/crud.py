import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from . import models, schemas
from .auth import hash_password, verify_password

logger = logging.getLogger(__name__)

# Stores do no validation: callers (see services) apply the business rules
# before anything reaches them.


def round_amount(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


class ProductRepository:
    """Catalog store: keyed CRUD over products."""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[models.Product]:
        return self.db.query(models.Product).order_by(models.Product.id).all()

    def get_by_id(self, product_id: int) -> Optional[models.Product]:
        return self.db.get(models.Product, product_id)

    def add(self, product: models.Product) -> models.Product:
        # id 0 means "not yet stored"; the database assigns the real one
        if not product.id:
            product.id = None
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update(self, product: models.Product) -> bool:
        stored = self.db.get(models.Product, product.id)
        if not stored:
            return False
        stored.description = product.description
        stored.price = product.price
        self.db.commit()
        return True

    def remove(self, product_id: int) -> bool:
        deleted = self.db.query(models.Product).filter(models.Product.id == product_id).delete()
        self.db.commit()
        return deleted > 0


class BudgetRepository:
    """Budget store: headers plus their product lines.

    The catalog is injected so line hydration can run against any object
    exposing ``list_all()``.
    """

    def __init__(self, db: Session, catalog: ProductRepository):
        self.db = db
        self.catalog = catalog

    def list_all(self) -> List[models.Budget]:
        # headers only; resolving every line's product here would make the
        # listing pay for data it never shows
        return self.db.query(models.Budget).order_by(models.Budget.id).all()

    def get_by_id(self, budget_id: int) -> Optional[schemas.BudgetDetail]:
        header = self.db.get(models.Budget, budget_id)
        if not header:
            return None
        return schemas.BudgetDetail(
            id=header.id,
            recipient_name=header.recipient_name,
            creation_date=header.creation_date,
            lines=self._hydrate_lines(budget_id),
        )

    def _hydrate_lines(self, budget_id: int) -> List[schemas.BudgetLineRead]:
        rows = (
            self.db.query(models.BudgetLine)
            .filter(models.BudgetLine.budget_id == budget_id)
            .order_by(models.BudgetLine.id)
            .all()
        )
        # one catalog read for the whole budget, then in-memory resolution
        products: Dict[int, models.Product] = {p.id: p for p in self.catalog.list_all()}
        lines = []
        for row in rows:
            product = products.get(row.product_id)
            if product is None:
                logger.debug("budget %s line %s references missing product %s", budget_id, row.id, row.product_id)
                continue
            lines.append(
                schemas.BudgetLineRead(
                    id=row.id,
                    product=schemas.ProductRead.model_validate(product),
                    quantity=row.quantity,
                )
            )
        return lines

    def exists(self, budget_id: int) -> bool:
        return self.db.get(models.Budget, budget_id) is not None

    def add(self, header: models.Budget) -> models.Budget:
        if not header.id:
            header.id = None
        self.db.add(header)
        self.db.commit()
        self.db.refresh(header)
        return header

    def update(self, header: models.Budget) -> bool:
        stored = self.db.get(models.Budget, header.id)
        if not stored:
            return False
        stored.recipient_name = header.recipient_name
        stored.creation_date = header.creation_date
        self.db.commit()
        return True

    def remove(self, budget_id: int) -> bool:
        # children first so an enforced foreign key never rejects the header delete
        self.db.query(models.BudgetLine).filter(models.BudgetLine.budget_id == budget_id).delete()
        self.db.commit()
        deleted = self.db.query(models.Budget).filter(models.Budget.id == budget_id).delete()
        self.db.commit()
        return deleted > 0

    def add_line(self, budget_id: int, product_id: int, quantity: int) -> models.BudgetLine:
        line = models.BudgetLine(budget_id=budget_id, product_id=product_id, quantity=quantity)
        self.db.add(line)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ValueError("integrity error") from e
        self.db.refresh(line)
        return line


class UserRepository:
    """Read access to credential records, plus account creation for bootstrap."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_username(self, username: str) -> Optional[models.User]:
        return self.db.query(models.User).filter(models.User.username == username).first()

    def find_by_credentials(self, username: str, password: str) -> Optional[models.User]:
        user = self.get_by_username(username)
        if not user or not verify_password(password, user.password_hash):
            return None
        return user

    def add(self, user: schemas.UserCreate) -> models.User:
        db_user = models.User(
            name=user.name,
            username=user.username,
            password_hash=hash_password(user.password),
            role=user.role,
        )
        self.db.add(db_user)
        self.db.commit()
        self.db.refresh(db_user)
        return db_user
