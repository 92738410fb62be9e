import re

# MTN (77, 78, 76, 39) and Airtel (70, 75, 74) Uganda prefixes
UGANDA_MOBILE_RE = re.compile(r"^256(77|78|70|75|76|74|39)\d{7}$")


def normalize_phone(phone: str) -> str:
    """
    Нормализует номер телефона, удаляя все символы кроме цифр и плюса.

    Args:
        phone: Номер телефона в любом формате

    Returns:
        Нормализованный номер телефона

    Examples:
        >>> normalize_phone("+256 (772) 123-456")
        '+256772123456'
        >>> normalize_phone("256 772 123 456")
        '+256772123456'
    """
    if not phone:
        return ""

    digits_only = re.sub(r'\D', '', phone)
    if not digits_only:
        return ""

    return f"+{digits_only}"


def to_msisdn(phone: str) -> str:
    """Номер в формате шлюза: только цифры, с кодом страны (256...)."""
    return normalize_phone(phone).lstrip("+")


def is_mobile_money_number(phone: str) -> bool:
    return bool(UGANDA_MOBILE_RE.match(to_msisdn(phone)))
