from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Type, TypeVar

from rangecore.config import settings
from rangecore.domain.roles import OrgRole, TeamRole

E = TypeVar("E", bound=Enum)

# Keys probed when the provider hands over a nested membership object
_NESTED_KEYS = ("role", "org_role", "team_role", "access_role", "name", "value")


def _token(value: Any) -> str:
    text = str(value or "").strip().lower()
    for sep in ("-", " ", "."):
        text = text.replace(sep, "_")
    return text


def _unwrap(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        for key in _NESTED_KEYS:
            if value.get(key):
                return _unwrap(value[key])
        return None
    nested = getattr(value, "role", None)
    if nested is not None and not isinstance(value, str):
        return _unwrap(nested)
    return value


def _lookup(token: str, enum_cls: Type[E], aliases: Mapping[str, str]) -> Optional[E]:
    try:
        return enum_cls(token)
    except ValueError:
        pass
    alias = aliases.get(token)
    if alias:
        try:
            return enum_cls(alias)
        except ValueError:
            return None
    return None


def _normalize(
    value: Any,
    enum_cls: Type[E],
    aliases: Mapping[str, str],
    prefixes: Sequence[str],
) -> Optional[E]:
    if isinstance(value, enum_cls):
        return value
    raw = _unwrap(value)
    if raw is None or isinstance(raw, bool):
        return None
    token = _token(raw)
    if not token:
        return None

    found = _lookup(token, enum_cls, aliases)
    if found is not None:
        return found

    for prefix in prefixes:
        p = _token(prefix)
        if p and token.startswith(p):
            found = _lookup(token[len(p):], enum_cls, aliases)
            if found is not None:
                return found
    return None


def normalize_org_role(
    value: Any,
    aliases: Optional[Mapping[str, str]] = None,
    prefixes: Optional[Sequence[str]] = None,
) -> Optional[OrgRole]:
    """
    Map a provider-shaped organization role onto OrgRole.
    Bare strings, prefixed strings ("org:squad_commander"), nested mappings and
    objects carrying a `role` attribute are accepted. Unrecognized values give None.
    """
    return _normalize(
        value,
        OrgRole,
        settings.roles.org_aliases if aliases is None else aliases,
        settings.roles.provider_prefixes if prefixes is None else prefixes,
    )


def normalize_team_role(
    value: Any,
    aliases: Optional[Mapping[str, str]] = None,
    prefixes: Optional[Sequence[str]] = None,
) -> Optional[TeamRole]:
    return _normalize(
        value,
        TeamRole,
        settings.roles.team_aliases if aliases is None else aliases,
        settings.roles.provider_prefixes if prefixes is None else prefixes,
    )
