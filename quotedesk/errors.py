"""Error taxonomy shared by services, the identity gate and the HTTP layer."""
from typing import List

from .schemas import FieldError


class NotFound(LookupError):
    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailure(ValueError):
    """A business rule was violated; nothing was written.

    Carries every field-scoped message so the caller can re-present the
    input together with all of them at once.
    """

    def __init__(self, errors: List[FieldError]):
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))
        self.errors = list(errors)

    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class AuthDenied(Exception):
    def __init__(self, operation, decision):
        super().__init__(f"{operation.value}: {decision.value}")
        self.operation = operation
        self.decision = decision


class SessionUnavailable(RuntimeError):
    """The identity gate was called without a session context."""
