"""Boleto lifecycle state machine"""

from enum import Enum
from typing import Dict, FrozenSet

from boleto_gateway.domain.exceptions import InvalidStateTransitionError


class BoletoStatus(str, Enum):
    """Local status codes stored in boleto.status_codigo"""

    PENDING = "01"
    PAID = "61"
    WRITTEN_OFF = "57"

    @property
    def descricao(self) -> str:
        return STATUS_DESCRIPTIONS[self]


STATUS_DESCRIPTIONS: Dict[BoletoStatus, str] = {
    BoletoStatus.PENDING: "A VENCER",
    BoletoStatus.PAID: "PAGO",
    BoletoStatus.WRITTEN_OFF: "BAIXADO",
}

INITIAL_STATUS = BoletoStatus.PENDING

# PAID and WRITTEN_OFF are terminal: nothing leaves them
ALLOWED_TRANSITIONS: Dict[BoletoStatus, FrozenSet[BoletoStatus]] = {
    BoletoStatus.PENDING: frozenset({BoletoStatus.PENDING, BoletoStatus.PAID, BoletoStatus.WRITTEN_OFF}),
    BoletoStatus.PAID: frozenset(),
    BoletoStatus.WRITTEN_OFF: frozenset(),
}


def parse_status(code: str) -> BoletoStatus:
    """Map a stored status code to BoletoStatus"""
    try:
        return BoletoStatus(code)
    except ValueError:
        raise InvalidStateTransitionError(f"Unknown boleto status code {code!r}")


def can_transition(current: BoletoStatus, target: BoletoStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current_code: str, target: BoletoStatus) -> BoletoStatus:
    """
    Validate that a boleto in `current_code` may move to `target`.

    Returns:
        The parsed current status

    Raises:
        InvalidStateTransitionError: If the transition is not allowed
    """
    current = parse_status(current_code)
    if not can_transition(current, target):
        raise InvalidStateTransitionError(
            f"Boleto in status {current.descricao} ({current.value}) cannot move to {target.descricao}"
        )
    return current
