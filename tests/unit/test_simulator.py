"""Unit tests for the in-process Bradesco simulator"""

import random
from boleto_gateway.domain.barcode import modulo11, only_digits
from boleto_gateway.infrastructure.clients.simulator import SimulatedTransport

REGISTRATION_BODY = {
    "vlNominalTitulo": 15050,
    "dtVencimentoTitulo": "05.03.2026",
    "dtEmissaoTitulo": "01.02.2026",
    "idProduto": 9,
    "nomePagador": "Maria Oliveira",
    "nuCpfcnpjPagador": 12345678909,
}


async def test_register_returns_valid_barcode():
    response = await SimulatedTransport(random.Random(1)).register(REGISTRATION_BODY)

    nosso_numero = str(response["nuTituloGerado"])
    barcode = response["cdBarras"]

    assert len(nosso_numero) == 10
    assert response["cdRetorno"] == 0
    assert len(barcode) == 44
    assert barcode[9:19] == "0000015050"
    assert int(barcode[4]) == modulo11(barcode[:4] + barcode[5:])
    assert barcode[19:23] == "3987"  # agência
    assert barcode[23:25] == "09"  # carteira
    assert barcode[25:36] == nosso_numero.zfill(11)
    assert len(only_digits(response["linhaDigitavel"])) == 47


async def test_register_is_reproducible_with_seed():
    first = await SimulatedTransport(random.Random(7)).register(REGISTRATION_BODY)
    second = await SimulatedTransport(random.Random(7)).register(REGISTRATION_BODY)

    assert first["nuTituloGerado"] == second["nuTituloGerado"]
    assert first["cdBarras"] == second["cdBarras"]


async def test_maintenance_operations_succeed():
    transport = SimulatedTransport(random.Random(1))

    inquiry = await transport.inquire({"nossoNumero": 1234567890})
    amend = await transport.amend({"nossoNumero": 1234567890})
    write_off = await transport.write_off({"nossoNumero": 1234567890})

    assert inquiry["titulo"]["codStatus"] == 1
    assert inquiry["titulo"]["snumero"] == "1234567890"
    assert amend["status"] == 200
    assert "ALTERACAO EFETUADA" in amend["mensagem"]
    assert write_off["status"] == 200


async def test_register_rejects_value_outside_barcode_field():
    transport = SimulatedTransport(random.Random(1))

    too_large = await transport.register({**REGISTRATION_BODY, "vlNominalTitulo": 10_000_000_000})
    missing = await transport.register({**REGISTRATION_BODY, "vlNominalTitulo": 0})

    for response in (too_large, missing):
        assert response["cdRetorno"] != 0
        assert response["dsRetorno"] == "VALOR DO TITULO INVALIDO"
        assert "cdBarras" not in response
