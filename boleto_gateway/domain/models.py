"""Domain models - pure Python dataclasses representing gateway results"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional


@dataclass
class RegistrationResult:
    """Normalized answer of the bank's registration call"""

    nosso_numero: str
    linha_digitavel: str
    codigo_barras: str
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class InquiryResult:
    """Normalized status snapshot returned by the bank's inquiry call"""

    status: str
    status_code: Optional[int]
    due_date: Optional[date]
    paid_amount: Optional[Decimal]
    paid_date: Optional[date]
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Acknowledgement:
    """Bank acknowledgement for amendment and write-off requests"""

    status: int
    mensagem: str
    transacao: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class IssuedBoleto:
    """Outcome of a successful issue: the persisted boleto plus the bank's answer"""

    boleto: Any  # infrastructure.database.models.Boleto
    registration: RegistrationResult
