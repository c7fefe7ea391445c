"""
Transition table for the booking and support-ticket sub-flows.

Step variants live on the session; this module decides which moves
between them are legal. Every flow handler routes its state change through
``FlowStateMachine.apply`` so an undeclared jump (say, museum straight to
confirm) fails loudly instead of silently persisting an impossible state.

``None`` stands for "no active flow".

Usage:
    sm = FlowStateMachine()
    new_flow = sm.apply(None, FlowTrigger.START_BOOKING, ChoosingMuseum())
    assert new_flow.step == FlowStep.MUSEUM
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.schemas.session_schema import FlowState, FlowStep

logger = logging.getLogger(__name__)

BOOKING_STEPS = (FlowStep.MUSEUM, FlowStep.DATE, FlowStep.TICKETS, FlowStep.CONFIRM)
SUPPORT_STEPS = (
    FlowStep.NAME, FlowStep.EMAIL, FlowStep.ISSUE_TYPE, FlowStep.DESCRIPTION, FlowStep.PRIORITY,
)


class FlowTrigger(str, Enum):
    """Events that move a session between steps."""
    GREETING_RESET = "greeting_reset"
    CANCELLED = "cancelled"
    # Booking
    START_BOOKING = "start_booking"
    MUSEUM_SELECTED = "museum_selected"
    MUSEUM_NOT_MATCHED = "museum_not_matched"
    DATE_ACCEPTED = "date_accepted"
    DATE_REJECTED = "date_rejected"
    TICKETS_ACCEPTED = "tickets_accepted"
    TICKETS_REJECTED = "tickets_rejected"
    MUSEUM_MISSING = "museum_missing"
    CONFIRMATION_UNCLEAR = "confirmation_unclear"
    GO_BACK = "go_back"
    PAYMENT_TRIGGERED = "payment_triggered"
    # Support ticket
    START_SUPPORT = "start_support"
    NAME_GIVEN = "name_given"
    EMAIL_ACCEPTED = "email_accepted"
    EMAIL_REJECTED = "email_rejected"
    ISSUE_TYPE_GIVEN = "issue_type_given"
    DESCRIPTION_GIVEN = "description_given"
    PRIORITY_REJECTED = "priority_rejected"
    TICKET_CREATED = "ticket_created"


@dataclass(frozen=True)
class Transition:
    """A single valid step transition."""
    from_step: Optional[FlowStep]
    to_step: Optional[FlowStep]
    trigger: FlowTrigger


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current step."""


def _global_transitions() -> list[Transition]:
    """Greeting resets from anywhere; cancellation ends any active flow."""
    transitions = [Transition(None, None, FlowTrigger.GREETING_RESET)]
    for step in BOOKING_STEPS + SUPPORT_STEPS:
        transitions.append(Transition(step, None, FlowTrigger.GREETING_RESET))
        transitions.append(Transition(step, None, FlowTrigger.CANCELLED))
    return transitions


def step_of(flow: Optional[FlowState]) -> Optional[FlowStep]:
    return flow.step if flow is not None else None


class FlowStateMachine:
    """Validates flow moves against an explicit transition table."""

    TRANSITIONS: list[Transition] = [
        # --- Booking: start / restart ---
        Transition(None, FlowStep.MUSEUM, FlowTrigger.START_BOOKING),
        Transition(FlowStep.CONFIRM, FlowStep.MUSEUM, FlowTrigger.START_BOOKING),

        # --- Booking: museum ---
        Transition(FlowStep.MUSEUM, FlowStep.DATE, FlowTrigger.MUSEUM_SELECTED),
        Transition(FlowStep.MUSEUM, FlowStep.MUSEUM, FlowTrigger.MUSEUM_NOT_MATCHED),

        # --- Booking: date ---
        Transition(FlowStep.DATE, FlowStep.TICKETS, FlowTrigger.DATE_ACCEPTED),
        Transition(FlowStep.DATE, FlowStep.DATE, FlowTrigger.DATE_REJECTED),
        Transition(FlowStep.DATE, FlowStep.MUSEUM, FlowTrigger.GO_BACK),

        # --- Booking: tickets ---
        Transition(FlowStep.TICKETS, FlowStep.CONFIRM, FlowTrigger.TICKETS_ACCEPTED),
        Transition(FlowStep.TICKETS, FlowStep.TICKETS, FlowTrigger.TICKETS_REJECTED),
        Transition(FlowStep.TICKETS, FlowStep.DATE, FlowTrigger.GO_BACK),
        Transition(FlowStep.TICKETS, None, FlowTrigger.MUSEUM_MISSING),

        # --- Booking: confirm ---
        Transition(FlowStep.CONFIRM, None, FlowTrigger.PAYMENT_TRIGGERED),
        Transition(FlowStep.CONFIRM, FlowStep.CONFIRM, FlowTrigger.CONFIRMATION_UNCLEAR),
        Transition(FlowStep.CONFIRM, FlowStep.TICKETS, FlowTrigger.GO_BACK),

        # --- Support ticket (linear, no go-back) ---
        Transition(None, FlowStep.NAME, FlowTrigger.START_SUPPORT),
        Transition(FlowStep.NAME, FlowStep.EMAIL, FlowTrigger.NAME_GIVEN),
        Transition(FlowStep.EMAIL, FlowStep.ISSUE_TYPE, FlowTrigger.EMAIL_ACCEPTED),
        Transition(FlowStep.EMAIL, FlowStep.EMAIL, FlowTrigger.EMAIL_REJECTED),
        Transition(FlowStep.ISSUE_TYPE, FlowStep.DESCRIPTION, FlowTrigger.ISSUE_TYPE_GIVEN),
        Transition(FlowStep.DESCRIPTION, FlowStep.PRIORITY, FlowTrigger.DESCRIPTION_GIVEN),
        Transition(FlowStep.PRIORITY, FlowStep.PRIORITY, FlowTrigger.PRIORITY_REJECTED),
        Transition(FlowStep.PRIORITY, None, FlowTrigger.TICKET_CREATED),
    ] + _global_transitions()

    def next_step(self, current: Optional[FlowStep], trigger: FlowTrigger) -> Optional[FlowStep]:
        """
        Resolve the step reached from ``current`` via ``trigger``.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_step == current and t.trigger == trigger:
                return t.to_step

        label = current.value if current is not None else "idle"
        valid = [t.value for t in self.get_valid_triggers(current)]
        raise InvalidTransitionError(
            f"No valid transition from '{label}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def apply(
        self,
        current: Optional[FlowState],
        trigger: FlowTrigger,
        target: Optional[FlowState],
    ) -> Optional[FlowState]:
        """
        Check that ``target`` is where ``trigger`` leads and return it.

        Raises:
            InvalidTransitionError: If the trigger is not valid here or
                ``target`` is a different step than the table allows.
        """
        from_step = step_of(current)
        expected = self.next_step(from_step, trigger)
        actual = step_of(target)
        if actual != expected:
            raise InvalidTransitionError(
                f"Trigger '{trigger.value}' leads to "
                f"'{expected.value if expected else 'idle'}', "
                f"not '{actual.value if actual else 'idle'}'"
            )
        logger.debug(
            "Flow transition: %s -> %s (trigger: %s)",
            from_step.value if from_step else "idle",
            actual.value if actual else "idle",
            trigger.value,
        )
        return target

    def get_valid_triggers(self, current: Optional[FlowStep]) -> list[FlowTrigger]:
        """Return all triggers valid from the given step."""
        return [t.trigger for t in self.TRANSITIONS if t.from_step == current]

    @staticmethod
    def is_booking_step(step: Optional[FlowStep]) -> bool:
        return step in BOOKING_STEPS

    @staticmethod
    def is_support_step(step: Optional[FlowStep]) -> bool:
        return step in SUPPORT_STEPS
