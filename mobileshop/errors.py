from fastapi import HTTPException, status


class ShopError(HTTPException):
    """Base for every error the shop services raise on purpose."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(ShopError):
    """Bad input shape or a broken business rule. Nothing was written."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ValidationError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ShopError):
    """Uniqueness clash or a lost race on a guarded update."""

    status_code = status.HTTP_409_CONFLICT


class PersistenceError(ShopError):
    """Storage failure. The in-flight transaction has been rolled back."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
