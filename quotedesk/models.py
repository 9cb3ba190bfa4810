from sqlalchemy import Column, Date, Integer, String, ForeignKey, Numeric
from .db import Base


class Product(Base):
    __tablename__ = "products"
    # ids are never reused, so lines of a deleted product stay orphaned
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String(250), nullable=True)
    price = Column(Numeric(10, 2), nullable=False)


class Budget(Base):
    __tablename__ = "budgets"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, index=True)
    recipient_name = Column(String, nullable=False)
    creation_date = Column(Date, nullable=False)


class BudgetLine(Base):
    __tablename__ = "budget_lines"

    id = Column(Integer, primary_key=True, index=True)
    budget_id = Column(Integer, ForeignKey("budgets.id"), nullable=False, index=True)
    # plain reference: products may be deleted while lines still point at them;
    # hydration drops such lines instead of the delete failing
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    username = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    # 'Administrator' or 'Client'; any other value authenticates but grants nothing
    role = Column(String, nullable=False, default="Client", index=True)
