"""
Booking flow steps and the transition table between them.
"""

import enum
from typing import Dict, Optional, Tuple


class FlowStep(str, enum.Enum):
    """Enumeration for the steps of the booking wizard."""
    LOGIN = "login"
    MOVIES = "movies"
    SEATS = "seats"
    PAYMENT = "payment"
    TICKET = "ticket"
    ADMIN = "admin"


class FlowTrigger(str, enum.Enum):
    """Events that move a flow between steps."""
    LOGIN = "login"
    ADMIN_LOGIN = "admin_login"
    MOVIE_CHOSEN = "movie_chosen"
    SEATS_CONFIRMED = "seats_confirmed"
    PAYMENT_CONFIRMED = "payment_confirmed"
    RETURN_HOME = "return_home"
    LOGOUT = "logout"
    BACK = "back"


# (from, trigger) -> to. Logout and back are handled separately below.
TRANSITIONS: Dict[Tuple[FlowStep, FlowTrigger], FlowStep] = {
    (FlowStep.LOGIN, FlowTrigger.LOGIN): FlowStep.MOVIES,
    (FlowStep.LOGIN, FlowTrigger.ADMIN_LOGIN): FlowStep.ADMIN,
    (FlowStep.MOVIES, FlowTrigger.MOVIE_CHOSEN): FlowStep.SEATS,
    (FlowStep.SEATS, FlowTrigger.SEATS_CONFIRMED): FlowStep.PAYMENT,
    (FlowStep.PAYMENT, FlowTrigger.PAYMENT_CONFIRMED): FlowStep.TICKET,
    (FlowStep.TICKET, FlowTrigger.RETURN_HOME): FlowStep.MOVIES,
}

LOGOUT_FROM = frozenset({
    FlowStep.MOVIES,
    FlowStep.SEATS,
    FlowStep.PAYMENT,
    FlowStep.TICKET,
    FlowStep.ADMIN,
})

PREVIOUS_STEP: Dict[FlowStep, FlowStep] = {
    FlowStep.SEATS: FlowStep.MOVIES,
    FlowStep.PAYMENT: FlowStep.SEATS,
}


def next_step(current: FlowStep, trigger: FlowTrigger) -> Optional[FlowStep]:
    """
    Resolve the step a trigger leads to from the current step.

    Returns None when the trigger is not legal from ``current``. ``BACK``
    from a step without a predecessor resolves to the same step.
    """
    if trigger is FlowTrigger.LOGOUT:
        return FlowStep.LOGIN if current in LOGOUT_FROM else None
    if trigger is FlowTrigger.BACK:
        return PREVIOUS_STEP.get(current, current)
    return TRANSITIONS.get((current, trigger))
