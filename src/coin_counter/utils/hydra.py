"""Hydra ConfigStore registration for pluggable components."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from hydra.core.config_store import ConfigStore
from loguru import logger

T = TypeVar("T", bound=type[Any])


def register(
    group: str, name: str | None = None, **defaults: Any
) -> Callable[[T], T]:
    """Class decorator storing a ``_target_`` config node for ``cls``.

    The node lands in ``group`` under ``name`` (the snake-cased class
    name by default), so ``camera=directory`` style overrides can select it.

    Arguments:
        group: ConfigStore group, e.g. ``"camera"`` or ``"sink"``.
        name: Config name within the group.
        **defaults: Default constructor arguments written into the node.
    """

    def _store(cls: T) -> T:
        config_name = name or _snake_case(cls.__name__)
        node = {"_target_": f"{cls.__module__}.{cls.__qualname__}", **defaults}
        logger.debug(f"Registering {cls.__name__} as {group}/{config_name}")
        ConfigStore.instance().store(group=group, name=config_name, node=node)
        return cls

    return _store


def _snake_case(name: str) -> str:
    chars: list[str] = []
    for i, ch in enumerate(name):
        if ch.isupper() and i > 0 and not name[i - 1].isupper():
            chars.append("_")
        chars.append(ch.lower())
    return "".join(chars)
