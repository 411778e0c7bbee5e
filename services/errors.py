class EngineError(Exception):
    status_code = 500
    code = "engine_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(EngineError):
    status_code = 404
    code = "not_found"


class InvalidOperationError(EngineError):
    status_code = 400
    code = "invalid_operation"


class ConflictError(EngineError):
    status_code = 409
    code = "conflict"


class StorageError(EngineError):
    status_code = 503
    code = "storage_error"
