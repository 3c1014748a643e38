"""
Ordered fallback chains.

``first_successful`` runs providers in order and returns the first result that
does not raise. When every provider fails it either returns the supplied safe
default or raises ``FallbackExhausted`` with the collected errors.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple, TypeVar

from .exceptions import FallbackExhausted

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

_NO_DEFAULT = object()

Attempt = Tuple[str, Callable[[], T]]


def first_successful(
    attempts: Sequence[Attempt],
    *,
    default=_NO_DEFAULT,
    name: str = "fallback",
):
    errors: List[BaseException] = []
    for label, attempt in attempts:
        try:
            result = attempt()
        except Exception as e:
            LOGGER.warning("%s: %s failed: %s", name, label, e)
            errors.append(e)
            continue
        if errors:
            LOGGER.info("%s: recovered with %s", name, label)
        return result
    if default is _NO_DEFAULT:
        raise FallbackExhausted(name, errors) from (errors[-1] if errors else None)
    LOGGER.debug("%s: using safe default", name)
    return default
