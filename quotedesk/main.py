import logging
from typing import List, Optional

from fastapi import FastAPI, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session
from starlette.middleware.sessions import SessionMiddleware

from .db import Base, engine, SessionLocal
from . import config, crud, schemas, services, totals
from .auth import IdentityGate, SessionContext
from .errors import AuthDenied, NotFound, SessionUnavailable, ValidationFailure
from .policy import Decision, Operation, decide

logging.basicConfig(level=config.state.log_level)
logger = logging.getLogger(__name__)

# Create tables if not existing (for demo). In production, use a migration tool.
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Quotedesk")
app.add_middleware(
    SessionMiddleware,
    secret_key=config.state.session_secret,
    max_age=config.session_max_age(),
)


# -------------------- Dependencies --------------------

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_products(db: Session = Depends(get_db)) -> crud.ProductRepository:
    return crud.ProductRepository(db)


def get_budgets(db: Session = Depends(get_db), products: crud.ProductRepository = Depends(get_products)) -> crud.BudgetRepository:
    return crud.BudgetRepository(db, catalog=products)


def get_gate(db: Session = Depends(get_db)) -> IdentityGate:
    return IdentityGate(crud.UserRepository(db))


def get_session_context(request: Request) -> Optional[SessionContext]:
    # None when SessionMiddleware is not installed; the gate rejects that
    if "session" not in request.scope:
        return None
    return request.session


def get_principal(ctx: Optional[SessionContext] = Depends(get_session_context), gate: IdentityGate = Depends(get_gate)) -> schemas.Principal:
    return gate.principal(ctx)


def require(operation: Operation):
    """Dependency factory applying the authorization table to one operation."""
    def check(principal: schemas.Principal = Depends(get_principal)) -> schemas.Principal:
        decision = decide(principal, operation)
        if decision is not Decision.ALLOW:
            raise AuthDenied(operation, decision)
        return principal
    return check


# -------------------- Error mapping --------------------

@app.exception_handler(AuthDenied)
async def auth_denied_handler(request: Request, exc: AuthDenied):
    logger.info("denied %s on %s %s: %s", exc.operation.value, request.method, request.url.path, exc.decision.value)
    target = "/login" if exc.decision is Decision.LOGIN else "/access-denied"
    return RedirectResponse(url=target, status_code=303)


@app.exception_handler(ValidationFailure)
async def validation_failure_handler(request: Request, exc: ValidationFailure):
    return JSONResponse(status_code=400, content={"detail": [e.model_dump() for e in exc.errors]})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(SessionUnavailable)
async def session_unavailable_handler(request: Request, exc: SessionUnavailable):
    logger.error("identity gate called without a session on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "session unavailable"})


# -------------------- Session --------------------

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/", response_model=schemas.Principal)
def home(principal: schemas.Principal = Depends(get_principal)):
    return principal


@app.get("/login")
def login_status(ctx: Optional[SessionContext] = Depends(get_session_context), gate: IdentityGate = Depends(get_gate)):
    return {"authenticated": gate.is_authenticated(ctx)}


@app.post("/login", response_model=schemas.Principal)
def login(payload: schemas.LoginRequest, ctx: Optional[SessionContext] = Depends(get_session_context), gate: IdentityGate = Depends(get_gate)):
    if not payload.username or not payload.password:
        raise HTTPException(status_code=400, detail="username and password are required")
    if not gate.login(ctx, payload.username, payload.password):
        raise HTTPException(status_code=401, detail="invalid credentials")
    return gate.principal(ctx)


@app.get("/logout")
def logout(ctx: Optional[SessionContext] = Depends(get_session_context), gate: IdentityGate = Depends(get_gate)):
    gate.logout(ctx)
    return RedirectResponse(url="/login", status_code=303)


@app.get("/access-denied")
async def access_denied():
    return JSONResponse(status_code=403, content={"detail": "access denied"})


# -------------------- Products --------------------

@app.get("/products", response_model=List[schemas.ProductRead], dependencies=[Depends(require(Operation.PRODUCT_LIST))])
def list_products(products: crud.ProductRepository = Depends(get_products)):
    return products.list_all()


@app.post("/products", response_model=schemas.ProductRead, status_code=201, dependencies=[Depends(require(Operation.PRODUCT_CREATE))])
def create_product(data: schemas.ProductCreate, products: crud.ProductRepository = Depends(get_products)):
    return services.create_product(products, data)


@app.get("/products/{product_id}", response_model=schemas.ProductRead, dependencies=[Depends(require(Operation.PRODUCT_DETAIL))])
def get_product(product_id: int, products: crud.ProductRepository = Depends(get_products)):
    return services.get_product(products, product_id)


@app.put("/products/{product_id}", response_model=schemas.ProductRead, dependencies=[Depends(require(Operation.PRODUCT_EDIT))])
def update_product(product_id: int, data: schemas.ProductCreate, products: crud.ProductRepository = Depends(get_products)):
    return services.update_product(products, product_id, data)


@app.delete("/products/{product_id}", dependencies=[Depends(require(Operation.PRODUCT_DELETE))])
def delete_product(product_id: int, products: crud.ProductRepository = Depends(get_products)):
    removed = services.remove_product(products, product_id)
    return {"deleted": product_id, "existed": removed}


# -------------------- Budgets --------------------

def _detail_response(budget: schemas.BudgetDetail) -> schemas.BudgetDetailResponse:
    return schemas.BudgetDetailResponse(**budget.model_dump(), totals=totals.summarize(budget))


@app.get("/budgets", response_model=List[schemas.BudgetRead], dependencies=[Depends(require(Operation.BUDGET_LIST))])
def list_budgets(budgets: crud.BudgetRepository = Depends(get_budgets)):
    return budgets.list_all()


@app.post("/budgets", response_model=schemas.BudgetRead, status_code=201, dependencies=[Depends(require(Operation.BUDGET_CREATE))])
def create_budget(data: schemas.BudgetCreate, budgets: crud.BudgetRepository = Depends(get_budgets)):
    return services.create_budget(budgets, data)


@app.get("/budgets/{budget_id}", response_model=schemas.BudgetDetailResponse, dependencies=[Depends(require(Operation.BUDGET_DETAIL))])
def get_budget(budget_id: int, budgets: crud.BudgetRepository = Depends(get_budgets)):
    return _detail_response(services.get_budget(budgets, budget_id))


@app.put("/budgets/{budget_id}", response_model=schemas.BudgetDetailResponse, dependencies=[Depends(require(Operation.BUDGET_EDIT))])
def update_budget(budget_id: int, data: schemas.BudgetCreate, budgets: crud.BudgetRepository = Depends(get_budgets)):
    return _detail_response(services.update_budget(budgets, budget_id, data))


@app.delete("/budgets/{budget_id}", dependencies=[Depends(require(Operation.BUDGET_DELETE))])
def delete_budget(budget_id: int, budgets: crud.BudgetRepository = Depends(get_budgets)):
    removed = services.remove_budget(budgets, budget_id)
    return {"deleted": budget_id, "existed": removed}


@app.post("/budgets/{budget_id}/lines", response_model=schemas.BudgetDetailResponse, status_code=201, dependencies=[Depends(require(Operation.BUDGET_ADD_LINE))])
def add_budget_line(budget_id: int, data: schemas.BudgetLineCreate, budgets: crud.BudgetRepository = Depends(get_budgets)):
    return _detail_response(services.add_line(budgets, budget_id, data))
