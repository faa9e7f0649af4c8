"""
Transition policy factory.
Configures which transition policy the lifecycle service uses.
"""

from typing import Optional

from campus_events.services.interfaces.transition_policy import TransitionPolicy
from campus_events.services.interfaces.permissive_policy import PermissiveTransitionPolicy
from campus_events.services.interfaces.strict_policy import StrictTransitionPolicy
from campus_events.core.config import get_settings
from campus_events.core.logging import get_logger

logger = get_logger(__name__)

POLICIES: dict[str, type[TransitionPolicy]] = {
    PermissiveTransitionPolicy.name: PermissiveTransitionPolicy,
    StrictTransitionPolicy.name: StrictTransitionPolicy,
}


def build_transition_policy(name: str) -> TransitionPolicy:
    """
    Build a policy by name ("permissive" or "strict").

    Unknown names fall back to the permissive policy so a typo in the
    environment never locks administrators out of correcting records.
    """
    policy_cls = POLICIES.get(name.lower())
    if policy_cls is None:
        logger.warning("unknown_transition_policy", requested=name, fallback="permissive")
        policy_cls = PermissiveTransitionPolicy
    return policy_cls()


_policy: Optional[TransitionPolicy] = None


def get_transition_policy() -> TransitionPolicy:
    """Get transition policy singleton."""
    global _policy
    if _policy is None:
        _policy = build_transition_policy(get_settings().TRANSITION_POLICY)
    return _policy


def set_transition_policy(policy: Optional[TransitionPolicy]) -> None:
    """Swap the active policy (None resets to the configured one)."""
    global _policy
    _policy = policy
