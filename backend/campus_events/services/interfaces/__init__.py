"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .transition_policy import TransitionPolicy
from .permissive_policy import PermissiveTransitionPolicy
from .strict_policy import StrictTransitionPolicy

__all__ = ['TransitionPolicy', 'PermissiveTransitionPolicy', 'StrictTransitionPolicy']
