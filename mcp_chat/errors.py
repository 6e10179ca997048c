"""Domain-level exceptions for the chat client core."""


class BadRequestError(ValueError):
    """Raised for client-side invalid requests at the domain layer."""


class EmptyMessageError(BadRequestError):
    """Raised when a submitted message is blank after trimming."""

    def __init__(self) -> None:
        super().__init__("Message is empty")


class ModelNotFoundError(LookupError):
    def __init__(self, model_id: str) -> None:
        super().__init__(f"Unknown model: {model_id}")
        self.model_id = model_id


class UnknownConnectorError(LookupError):
    def __init__(self, connector_id: str) -> None:
        super().__init__(f"Unknown connector: {connector_id}")
        self.connector_id = connector_id
