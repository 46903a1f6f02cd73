"""HTML rendering of a boleto for display or printing"""

from html import escape

from boleto_gateway.infrastructure.database.models import Boleto


def _brl(value) -> str:
    """Format a Decimal as Brazilian currency: 1234.5 -> 1.234,50"""
    text = f"{value:,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def render_boleto_html(boleto: Boleto) -> str:
    config = boleto.configuracao
    cliente = boleto.cliente
    cnpj = f"{config.cnpj_raiz}.{config.filial}/{config.controle}"

    return f"""<html>
  <head><meta charset="utf-8"><title>Boleto {escape(boleto.nosso_numero)}</title></head>
  <body style="font-family: Arial; padding: 40px;">
    <h1>Boleto de Cobrança</h1>
    <hr>
    <p><strong>Beneficiário:</strong> {escape(config.descricao)}</p>
    <p><strong>CNPJ:</strong> {escape(cnpj)}</p>
    <p><strong>Agência/Conta:</strong> {escape(config.agencia or "")} / {escape(config.conta or "")}</p>
    <br>
    <p><strong>Pagador:</strong> {escape(cliente.nome)}</p>
    <p><strong>Documento:</strong> {escape(cliente.documento)}</p>
    <br>
    <p><strong>Nosso Número:</strong> {escape(boleto.nosso_numero)}</p>
    <p><strong>Seu Número:</strong> {escape(boleto.seu_numero)}</p>
    <p><strong>Valor:</strong> R$ {_brl(boleto.valor_nominal)}</p>
    <p><strong>Vencimento:</strong> {boleto.data_vencimento.strftime("%d/%m/%Y")}</p>
    <p><strong>Situação:</strong> {escape(boleto.status_descricao)}</p>
    <br>
    <p><strong>Linha Digitável:</strong></p>
    <p style="font-size: 18px; letter-spacing: 2px;">{escape(boleto.linha_digitavel)}</p>
  </body>
</html>
"""
