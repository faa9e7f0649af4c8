"""
Transition policy interface.
Decides which status / payment-status moves an application may make, so the
rules can be tightened without touching the lifecycle service.
"""

from abc import ABC, abstractmethod

from campus_events.models.application import ApplicationStatus, PaymentStatus


class TransitionPolicy(ABC):
    """
    Interface for application transition policies.

    Implementations:
    - PermissiveTransitionPolicy: any node may move to any node
    - StrictTransitionPolicy: explicit adjacency tables
    """

    name: str = "abstract"

    @abstractmethod
    def allows_status(self, current: ApplicationStatus, target: ApplicationStatus) -> bool:
        """
        Check whether an application may move from ``current`` to ``target``.

        Returns:
            True if the move is legal, False otherwise
        """

    @abstractmethod
    def allows_payment_status(self, current: PaymentStatus, target: PaymentStatus) -> bool:
        """Same check over the payment-status graph."""
