"""
Strict transition policy backed by adjacency tables.

Rejected, Cancelled and Completed are terminal. Refunded is terminal for
payments. Re-applying the current value is always allowed (idempotent retry).
"""

from campus_events.models.application import ApplicationStatus, PaymentStatus
from campus_events.services.interfaces.transition_policy import TransitionPolicy

S = ApplicationStatus
P = PaymentStatus

STATUS_EDGES: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    S.PENDING: frozenset({S.APPROVED, S.REJECTED, S.CANCELLED}),
    S.APPROVED: frozenset({S.COMPLETED, S.REJECTED, S.CANCELLED}),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
    S.COMPLETED: frozenset(),
}

PAYMENT_EDGES: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    P.UNVERIFIED: frozenset({P.VERIFIED, P.FAILED}),
    P.FAILED: frozenset({P.UNVERIFIED, P.VERIFIED}),
    P.VERIFIED: frozenset({P.REFUNDED, P.FAILED}),
    P.REFUNDED: frozenset(),
}


class StrictTransitionPolicy(TransitionPolicy):
    name = "strict"

    def __init__(
        self,
        status_edges: dict[ApplicationStatus, frozenset[ApplicationStatus]] = STATUS_EDGES,
        payment_edges: dict[PaymentStatus, frozenset[PaymentStatus]] = PAYMENT_EDGES,
    ):
        self.status_edges = status_edges
        self.payment_edges = payment_edges

    def allows_status(self, current: ApplicationStatus, target: ApplicationStatus) -> bool:
        return current == target or target in self.status_edges.get(current, frozenset())

    def allows_payment_status(self, current: PaymentStatus, target: PaymentStatus) -> bool:
        return current == target or target in self.payment_edges.get(current, frozenset())
