"""
Bank slip barcode and typeable line (linha digitável) construction.

Layout of the 44-digit barcode (FEBRABAN):

    [0:3]   bank code
    [3]     currency code (9 = real)
    [4]     general check digit, modulo 11
    [5:9]   due date factor
    [9:19]  value in cents, 10 digits
    [19:44] free field (bank specific)

The typeable line splits the barcode into five groups; the first three carry
their own modulo 10 check digit.
"""

from datetime import date

BRADESCO_BANK_CODE = "237"
CURRENCY_REAL = "9"

FACTOR_BASE_DATE = date(1997, 10, 7)
# The factor wrapped back to 1000 after reaching 9999 on 2025-02-21
FACTOR_MIN = 1000
FACTOR_MAX = 9999

# 10-digit value field: R$ 99.999.999,99
VALUE_FIELD_MAX_CENTS = 9_999_999_999


def only_digits(value: str) -> str:
    return "".join(ch for ch in value if ch.isdigit())


def modulo10(digits: str) -> int:
    """Modulo 10 check digit: weights 2,1 from the right, products summed digit by digit"""
    total = 0
    weight = 2
    for ch in reversed(digits):
        product = int(ch) * weight
        total += product // 10 + product % 10
        weight = 1 if weight == 2 else 2
    return (10 - total % 10) % 10


def modulo11(digits: str) -> int:
    """Modulo 11 check digit for the barcode: weights 2..9 from the right, 0/1/10 map to 1"""
    total = 0
    weight = 2
    for ch in reversed(digits):
        total += int(ch) * weight
        weight = 2 if weight == 9 else weight + 1
    dv = 11 - total % 11
    if dv in (0, 1, 10, 11):
        return 1
    return dv


def due_date_factor(due: date) -> int:
    """Days since 1997-10-07, wrapping to 1000 after 9999"""
    factor = (due - FACTOR_BASE_DATE).days
    if factor < FACTOR_MIN:
        return factor
    span = FACTOR_MAX - FACTOR_MIN + 1
    return (factor - FACTOR_MIN) % span + FACTOR_MIN


def bradesco_free_field(agencia: str, carteira: str, nosso_numero: str, conta: str) -> str:
    """Branch(4) + wallet(2) + nosso número(11) + account(7) + zero"""
    return (
        only_digits(agencia).zfill(4)[-4:]
        + only_digits(carteira).zfill(2)[-2:]
        + only_digits(nosso_numero).zfill(11)[-11:]
        + only_digits(conta).zfill(7)[-7:]
        + "0"
    )


def build_barcode(due: date, value_cents: int, free_field: str, bank_code: str = BRADESCO_BANK_CODE) -> str:
    """Assemble the 44-digit barcode with its general check digit"""
    if len(free_field) != 25:
        raise ValueError(f"Free field must have 25 digits, got {len(free_field)}")
    factor = str(due_date_factor(due)).zfill(4)
    if not 0 <= value_cents <= VALUE_FIELD_MAX_CENTS:
        raise ValueError(f"Value {value_cents} does not fit the barcode value field")
    value = str(value_cents).zfill(10)
    without_dv = bank_code + CURRENCY_REAL + factor + value + free_field
    dv = modulo11(without_dv)
    return without_dv[:4] + str(dv) + without_dv[4:]


def typeable_line(barcode: str) -> str:
    """Format a 44-digit barcode as the 47-digit linha digitável"""
    if len(barcode) != 44 or not barcode.isdigit():
        raise ValueError("Barcode must have exactly 44 digits")

    field1 = barcode[0:4] + barcode[19:24]
    field2 = barcode[24:34]
    field3 = barcode[34:44]
    field1 += str(modulo10(field1))
    field2 += str(modulo10(field2))
    field3 += str(modulo10(field3))

    return (
        f"{field1[:5]}.{field1[5:]} "
        f"{field2[:5]}.{field2[5:]} "
        f"{field3[:5]}.{field3[5:]} "
        f"{barcode[4]} "
        f"{barcode[5:19]}"
    )
