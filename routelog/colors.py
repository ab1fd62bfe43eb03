from __future__ import annotations

from types import MappingProxyType


GREEN = "\x1b[97;42m"
WHITE = "\x1b[90;47m"
YELLOW = "\x1b[97;43m"
RED = "\x1b[97;41m"
BLUE = "\x1b[97;44m"
MAGENTA = "\x1b[97;45m"
CYAN = "\x1b[97;46m"
RESET = "\x1b[0m"


METHOD_COLORS = MappingProxyType(
    {
        "GET": BLUE,
        "POST": CYAN,
        "PUT": YELLOW,
        "DELETE": RED,
        "PATCH": GREEN,
        "HEAD": MAGENTA,
        "OPTIONS": WHITE,
    }
)


def color_for_status(code: int) -> str:
    if 200 <= code < 300:
        return GREEN
    if 300 <= code < 400:
        return WHITE
    if 400 <= code < 500:
        return YELLOW
    return RED


def color_for_method(method: str) -> str:
    return METHOD_COLORS.get(method, RESET)
