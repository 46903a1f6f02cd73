"""In-process stand-in for the Bradesco API (MOCK_BRADESCO=true)"""

import random
from datetime import date, datetime
from typing import Any, Dict, Optional

from boleto_gateway.domain.barcode import (
    VALUE_FIELD_MAX_CENTS,
    bradesco_free_field,
    build_barcode,
    typeable_line,
)
from boleto_gateway.infrastructure.clients.bank import BankTransport

NOSSO_NUMERO_MIN = 1_000_000_000  # 10 digits, Bradesco style
NOSSO_NUMERO_MAX = 9_999_999_999

SUCCESS_CAUSE = "CBTT0000 - OPERAÇÃO REALIZADA COM SUCESSO"


def _parse_dotted_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    return datetime.strptime(value, "%d.%m.%Y").date()


class SimulatedTransport(BankTransport):
    """
    Produces bank-shaped answers without any network call.

    Registration draws a random 10-digit nosso número from `rng` and builds a
    barcode/typeable line with valid check digits from the payload's due date,
    value and wallet. A face value outside the barcode value field is
    answered with a non-zero cdRetorno, like the bank does. The other operations return the bank's success envelopes.
    Pass a seeded `random.Random` for reproducible identifiers.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        agencia: str = "3987",
        conta: str = "0000321",
    ):
        self.rng = rng or random.Random()
        self.agencia = agencia
        self.conta = conta

    def next_nosso_numero(self) -> str:
        return str(self.rng.randint(NOSSO_NUMERO_MIN, NOSSO_NUMERO_MAX))

    async def register(self, body: Dict[str, Any]) -> Dict[str, Any]:
        value_cents = int(body.get("vlNominalTitulo") or 0)
        if not 0 < value_cents <= VALUE_FIELD_MAX_CENTS:
            return {
                "cdRetorno": 1,
                "dsRetorno": "VALOR DO TITULO INVALIDO",
                "vlNominalTitulo": value_cents,
            }

        nosso_numero = self.next_nosso_numero()
        due = _parse_dotted_date(body.get("dtVencimentoTitulo")) or date.today()
        carteira = str(body.get("idProduto") or 9)

        free_field = bradesco_free_field(self.agencia, carteira, nosso_numero, self.conta)
        barcode = build_barcode(due, value_cents, free_field)

        return {
            "nuTituloGerado": int(nosso_numero),
            "cdBarras": barcode,
            "linhaDigitavel": typeable_line(barcode),
            "registraTitulo": 1,
            "cdRetorno": 0,
            "dsRetorno": "OPERACAO REALIZADA COM SUCESSO",
            "status": "REGISTRADO",
            "codStatus": 0,
            "nomePagador": body.get("nomePagador"),
            "nuCpfcnpjPagador": body.get("nuCpfcnpjPagador"),
            "vlNominalTitulo": value_cents,
            "dtEmissaoTitulo": body.get("dtEmissaoTitulo"),
            "dtVencimentoTitulo": body.get("dtVencimentoTitulo"),
        }

    async def inquire(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "status": 200,
            "transacao": "CBTTIAGS",
            "mensagem": "Operação realizada com sucesso.",
            "causa": SUCCESS_CAUSE,
            "titulo": {
                "snumero": str(body.get("nossoNumero", "")),
                "codStatus": 1,
                "status": "A VENCER/VENCIDO",
                "dataVencto": "",
                "vlrPagto": 0,
                "dtPagto": 0,
                "baixa": {"codigo": 0, "descricao": "", "data": 0},
            },
        }

    async def amend(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "status": 200,
            "transacao": "CBTTIAGP",
            "mensagem": "CBTT0445 - ALTERACAO EFETUADA",
            "causa": SUCCESS_CAUSE,
        }

    async def write_off(self, body: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "status": 200,
            "transacao": "CBTTIAGR",
            "mensagem": "CBTT0710 - SOLICITACAO DE ESTORNO EFETUADA COM SUCESSO",
        }
