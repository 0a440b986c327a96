"""
Domain errors for the breach workflow.

Services raise these; routers translate them into HTTP responses.
Failures on the e-mail side-effect paths are NOT raised to callers:
a failed send is recorded on the notification, a failed alert broadcast
is only logged.
"""


class BreachWorkflowError(Exception):
    """Base class for breach workflow errors."""
    pass


class FieldValidationError(BreachWorkflowError):
    """A required field is missing or a field value is not allowed."""
    pass


class InvalidArgumentError(FieldValidationError):
    """An argument is outside its allowed set (status value, renderer input)."""
    pass


class NotFoundError(BreachWorkflowError):
    """Referenced incident, notification or remediation does not exist."""
    pass


class UnknownNotificationTypeError(BreachWorkflowError):
    """Notification type has no matching template."""

    def __init__(self, notification_type: str):
        self.notification_type = notification_type
        super().__init__(f"Unknown notification type: {notification_type}")


class ConflictError(BreachWorkflowError):
    """Record already exists."""
    pass


class MailTransportError(BreachWorkflowError):
    """Raised by a mail transport when a message could not be handed off."""
    pass
