"""Authorization table: which role may perform which operation."""
from enum import Enum
from typing import Dict, FrozenSet

from .schemas import Principal


class Role(str, Enum):
    ADMINISTRATOR = "Administrator"
    CLIENT = "Client"


class Operation(str, Enum):
    PRODUCT_LIST = "product.list"
    PRODUCT_DETAIL = "product.detail"
    PRODUCT_CREATE = "product.create"
    PRODUCT_EDIT = "product.edit"
    PRODUCT_DELETE = "product.delete"
    BUDGET_LIST = "budget.list"
    BUDGET_DETAIL = "budget.detail"
    BUDGET_CREATE = "budget.create"
    BUDGET_EDIT = "budget.edit"
    BUDGET_DELETE = "budget.delete"
    BUDGET_ADD_LINE = "budget.add_line"


class Decision(str, Enum):
    ALLOW = "allow"
    LOGIN = "login"
    ACCESS_DENIED = "access_denied"


ADMIN_ONLY: FrozenSet[Role] = frozenset({Role.ADMINISTRATOR})
ANY_ROLE: FrozenSet[Role] = frozenset({Role.ADMINISTRATOR, Role.CLIENT})

ALLOWED_ROLES: Dict[Operation, FrozenSet[Role]] = {
    Operation.PRODUCT_LIST: ADMIN_ONLY,
    Operation.PRODUCT_DETAIL: ADMIN_ONLY,
    Operation.PRODUCT_CREATE: ADMIN_ONLY,
    Operation.PRODUCT_EDIT: ADMIN_ONLY,
    Operation.PRODUCT_DELETE: ADMIN_ONLY,
    Operation.BUDGET_LIST: ANY_ROLE,
    Operation.BUDGET_DETAIL: ANY_ROLE,
    Operation.BUDGET_CREATE: ADMIN_ONLY,
    Operation.BUDGET_EDIT: ADMIN_ONLY,
    Operation.BUDGET_DELETE: ADMIN_ONLY,
    Operation.BUDGET_ADD_LINE: ADMIN_ONLY,
}


def decide(principal: Principal, operation: Operation) -> Decision:
    """Evaluate the rules in order; the first match wins.

    - anonymous sessions are sent to login
    - administrator-only operations deny any other role
    - shared operations send unknown roles back to login
    """
    if not principal.authenticated:
        return Decision.LOGIN
    allowed = ALLOWED_ROLES[operation]
    role = principal.role
    if allowed == ADMIN_ONLY and role != Role.ADMINISTRATOR.value:
        return Decision.ACCESS_DENIED
    if role not in {r.value for r in allowed}:
        return Decision.LOGIN
    return Decision.ALLOW
