"""
Aion View - Domain Errors
Erros de negócio levantados pelos serviços e convertidos em JSON pela API
"""
from typing import Optional


class AionError(Exception):
    """Erro operacional conhecido"""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def to_dict(self) -> dict:
        return {"error": True, "message": self.message, "code": self.code}


class ValidationError(AionError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationError(AionError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Email ou senha incorretos"):
        super().__init__(message)


class InactiveAccountError(AionError):
    status_code = 403
    code = "INACTIVE_USER"

    def __init__(self, message: str = "Usuário inativo"):
        super().__init__(message)


class NotFoundError(AionError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Recurso não encontrado"):
        super().__init__(message)


class ConflictError(AionError):
    status_code = 409
    code = "DUPLICATE_ENTRY"


class AccountLockedError(AionError):
    status_code = 423
    code = "ACCOUNT_LOCKED"

    def __init__(self, minutes_left: int):
        super().__init__(f"Conta bloqueada. Tente novamente em {minutes_left} minuto(s)")
        self.minutes_left = minutes_left
