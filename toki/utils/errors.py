"""Exception types shared across the parser, engine, store and bot layers."""


class TokiError(Exception):
    """Base class for errors the application knows how to handle."""


class ParseUnresolved(TokiError):
    """No temporal pattern matched the text in any tier."""

    def __init__(self, text: str, locale: str, content: str = ""):
        super().__init__(f"Could not resolve a time from {text!r} ({locale})")
        self.text = text
        self.locale = locale
        self.content = content


class InvalidRecurrenceRule(TokiError):
    """A recurrence rule was built with an empty or out-of-range field."""


class UnsupportedLocale(TokiError, ValueError):
    """No pattern provider is registered for the requested locale."""


class DeliveryFailure(TokiError):
    """The messaging transport failed to deliver a notification."""


class StoreUnavailable(TokiError):
    """A call to the reminder store failed."""


class ReminderNotFound(TokiError):
    """The reminder does not exist or belongs to someone else."""

    def __init__(self, reminder_id: int):
        super().__init__(f"Reminder {reminder_id} not found")
        self.reminder_id = reminder_id


class InvalidStateTransition(TokiError):
    """The requested lifecycle change is not allowed from the current status."""


class ReminderLimitExceeded(TokiError):
    """The owner already holds the maximum number of scheduled reminders."""
