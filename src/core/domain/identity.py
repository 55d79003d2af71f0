"""
Identity — идентификаторы владельцев и получателей

Идентичность непрозрачна: кошелёк сравнивает её только на равенство.
Нулевой адрес и пустые значения считаются sentinel и не могут быть владельцем
или получателем.
"""

from typing import Any, Final


# =============================================================================
# SENTINELS
# =============================================================================

# Нулевой адрес (sentinel identity)
NULL_ADDRESS: Final[str] = "0x" + "0" * 40


def is_null_identity(identity: Any) -> bool:
    """
    Проверка, является ли идентичность null/sentinel.

    Args:
        identity: Кандидат (обычно строка-адрес)

    Returns:
        True для None, пустой/пробельной строки, NULL_ADDRESS или не-строки
    """
    if not isinstance(identity, str):
        return True
    if not identity.strip():
        return True
    return identity.lower() == NULL_ADDRESS
