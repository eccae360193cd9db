"""Best-effort applicant email notifications"""

from .service import EmailNotifier, NotifierPort, get_notifier

__all__ = ["EmailNotifier", "NotifierPort", "get_notifier"]
