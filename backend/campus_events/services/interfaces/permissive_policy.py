"""
Permissive transition policy - every status reachable from every status.
Matches how administrators have always been able to correct records.
"""

from campus_events.models.application import ApplicationStatus, PaymentStatus
from campus_events.services.interfaces.transition_policy import TransitionPolicy


class PermissiveTransitionPolicy(TransitionPolicy):
    name = "permissive"

    def allows_status(self, current: ApplicationStatus, target: ApplicationStatus) -> bool:
        return True

    def allows_payment_status(self, current: PaymentStatus, target: PaymentStatus) -> bool:
        return True
