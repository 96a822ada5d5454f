from __future__ import annotations

import dataclasses
from typing import Iterable, Mapping, Optional, Tuple

# selector keywords that expand to every known light; all but "all" are also actions
SHORTCUTS = ("all", "on", "off", "colorloop", "alert", "clear", "reset", "state")


@dataclasses.dataclass(frozen=True)
class Selection:
    ids: Tuple[str, ...]
    action: Optional[str] = None

    @property
    def is_query(self) -> bool:
        return self.action is None


def split_ids(value: str) -> Tuple[str, ...]:
    return tuple(value.split(","))


def effective_action(token: str, action: Optional[str]) -> Optional[str]:
    """The action a selector token implies; ``hue lights off`` means ``off``."""
    ids = split_ids(token)
    if len(ids) == 1 and ids[0] in SHORTCUTS and ids[0] != "all":
        return ids[0]
    return action or None


def resolve_selection(
    token: str,
    action: Optional[str],
    known_ids: Iterable[str],
    aliases: Optional[Mapping[str, str]] = None,
) -> Selection:
    """Resolve the selector token of ``hue lights <selector> [action]``.

    ``hue lights off`` behaves as ``hue lights all off``. A token naming an
    alias expands to the alias's id list. Anything else is taken as a comma
    separated id list; ids the bridge does not know are passed through so it
    can report them.
    """
    ids = split_ids(token)
    action = effective_action(token, action)
    if len(ids) == 1 and ids[0] in SHORTCUTS:
        ids = tuple(str(k) for k in known_ids)
    elif len(ids) == 1 and aliases and ids[0] in aliases:
        ids = split_ids(str(aliases[ids[0]]))
    return Selection(ids=ids, action=action)
