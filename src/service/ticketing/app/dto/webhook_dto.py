from enum import StrEnum


class TransitionOutcome(StrEnum):
    """What a gateway event did to the payment it names"""

    APPLIED = 'applied'  # this call won the transition
    NOOP = 'noop'  # already there, or the edge is not allowed
    IGNORED = 'ignored'  # unknown event, order or payment
