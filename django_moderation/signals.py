import logging

from django.dispatch import Signal

from .conf import moderation_settings

logger = logging.getLogger(moderation_settings.LOGGER_NAME)

# Sent once per applied decision (single or bulk item).
# kwargs: content, action, previous_status, new_status, principal, audit
decision_applied = Signal()

# Sent when content is approved or rejected by a decision.
# kwargs: content, principal
content_approved = Signal()
content_rejected = Signal()

# Sent when a report is resolved or dismissed.
# kwargs: report, action, principal, triggered_comment_action
report_resolved = Signal()


def safe_send(signal_obj, sender, **extra_kwargs):
    """
    Send a signal after the moderation write completed.

    Receiver failures are logged and never undo the moderation operation.
    """
    extra_kwargs.pop("signal", None)
    responses = signal_obj.send_robust(sender=sender, **extra_kwargs)
    for receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(f"Signal receiver {receiver!r} failed: {response}")
    return responses
