"""
Domain errors raised by the service layer.

Services never raise HTTPException; the handlers registered in
chemist.main translate these into responses. Messages for authorization
failures stay generic so callers cannot probe for records.
"""


class ChemistError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# VALIDATION

class ValidationError(ChemistError):
    status_code = 422

    def __init__(self, field: str | None, message: str):
        super().__init__(message)
        self.field = field


class EmptyCartError(ValidationError):
    def __init__(self):
        super().__init__("items", "Sale must contain items")


# CONSISTENCY

class ConsistencyError(ChemistError):
    status_code = 409


class InsufficientStockError(ConsistencyError):
    def __init__(self, item_name: str, available: int, requested: int | None = None):
        super().__init__(f"Insufficient stock for {item_name}: only {available} available")
        self.item_name = item_name
        self.available = available
        self.requested = requested


class DuplicateSaleNumberError(ConsistencyError):
    def __init__(self, sale_number: str):
        super().__init__(f"Sale number {sale_number} is already taken, retry the sale")
        self.sale_number = sale_number


class ReferencedRecordError(ConsistencyError):
    pass


# AUTHORIZATION

class NotPermittedError(ChemistError):
    status_code = 403

    def __init__(self):
        super().__init__("Not permitted")


# NOT FOUND

class NotFoundError(ChemistError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


# EXTERNAL

class NotificationError(ChemistError):
    status_code = 502
