from contactdesk.models.contact import ContactSubmission
from contactdesk.models.session import SessionRecord
from contactdesk.models.user import AdminUser

__all__ = [
    "AdminUser",
    "ContactSubmission",
    "SessionRecord",
]
