from collections.abc import Callable, Mapping
from typing import Any

from loguru import logger

NEXT_TOKEN = "nextToken"


def paginate(
    list_page: Callable[[str | None], Mapping[str, Any]], key: str
) -> list[Any]:
    """Drain a token-based listing API into one list.

    ``list_page`` is called with ``None`` first and then with each returned
    ``nextToken`` until a response carries none. Items found under ``key`` are
    concatenated in page order. Errors from any page propagate unchanged.
    """
    items: list[Any] = []
    cursor: str | None = None
    pages = 0

    while True:
        response = list_page(cursor)
        pages += 1
        items.extend(response.get(key, []))
        cursor = response.get(NEXT_TOKEN)
        if not cursor:
            break

    logger.debug(f"Fetched {len(items)} '{key}' item(s) over {pages} page(s)")
    return items
