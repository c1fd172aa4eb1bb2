"""
Error types for item data registration, linking, and synchronization.
"""

from dataclasses import dataclass
from typing import Optional


class ItemDataError(Exception):
    """Base exception for all item data errors."""

    def __init__(self, message: str, context: Optional["FieldContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class InvalidArgumentError(ItemDataError):
    """
    Raised when a required argument is missing or malformed.

    Examples:
    - ``None`` passed as the host item or data instance
    - Data type without a category handed to the helper
    - Empty category string in ``item_data``
    """

    pass


class NoUsableConstructorError(ItemDataError):
    """
    Raised when a data type cannot be instantiated without arguments.

    Examples:
    - Dataclass with a field that has no default
    - Explicit factory that requires positional arguments
    """

    pass


class UnsupportedTypeError(ItemDataError):
    """
    Raised when a type has no codec or cannot be linked as a data object.

    Examples:
    - ``encode``/``decode`` for a type that was never registered
    - ``scalar`` declaration on an unregistered field type
    - Composite field annotated with a non data-object type
    """

    pass


class DuplicateRegistrationError(ItemDataError):
    """Raised when a codec is registered twice for the same type."""

    pass


class DuplicateKeyError(ItemDataError):
    """
    Raised when two linked fields resolve to the same tree key.

    Examples:
    - Two ``scalar("count")`` declarations in one type
    - A scalar and a composite sharing one key
    """

    pass


class ConfigError(ItemDataError):
    """Raised when configuration cannot be loaded or parsed."""

    pass


class FieldLinkError(ItemDataError):
    """
    Base for recoverable, per-field failures during linking.

    These are logged and recorded in the link report while the remaining
    fields are still processed, unless strict mode is enabled.
    """

    @property
    def key(self) -> str | None:
        return self.context.key if self.context else None

    @property
    def field_name(self) -> str | None:
        return self.context.field_name if self.context else None


class FieldAccessDeniedError(FieldLinkError):
    """Raised when a field cannot be read from or written to an instance."""

    pass


class NullFieldValueError(FieldLinkError):
    """Raised when a linked field holds ``None`` at synchronization time."""

    pass


class TagMismatchError(FieldLinkError):
    """
    Raised when a tree node does not have the shape a field expects.

    Examples:
    - A ``str`` tag stored where an ``int`` field is linked
    - A leaf tag stored where a composite field expects a sub-tree
    - A value that the field's codec cannot represent
    """

    pass


@dataclass
class FieldContext:
    """
    Location of a per-field failure.

    Attributes:
        key: Tree key the field is linked to
        field_name: Attribute name on the data object
        owner: Name of the data object type
    """

    key: str
    field_name: str
    owner: str | None = None

    def format(self) -> str:
        """
        Format the context as a human-readable string.

        Returns:
            Formatted string like: "Stats.count (key 'count')"
        """
        name = f"{self.owner}.{self.field_name}" if self.owner else self.field_name
        return f"{name} (key '{self.key}')"


def make_field_error(
    error_type: type[FieldLinkError],
    message: str,
    key: str,
    field_name: str,
    owner: type | None = None,
) -> FieldLinkError:
    """
    Helper to create a per-field error with context.

    Args:
        error_type: Concrete ``FieldLinkError`` subclass to build
        message: Error description
        key: Tree key of the field
        field_name: Attribute name of the field
        owner: Optional data object type

    Returns:
        Error instance with context attached
    """
    context = FieldContext(
        key=key,
        field_name=field_name,
        owner=owner.__name__ if owner is not None else None,
    )
    return error_type(message, context)
