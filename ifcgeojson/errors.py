"""Exceptions that abort a whole conversion run."""


class ConversionError(Exception):
    """Base class for fatal conversion failures."""


class ModelOpenError(ConversionError):
    """The source model could not be opened or read."""

    def __init__(self, path, reason=None):
        self.path = str(path)
        message = f"Cannot open model {self.path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ElementNotFoundError(ConversionError):
    """An explicitly requested element does not exist in the model."""

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(f"Element {element_id} not found")
