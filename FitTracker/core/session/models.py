"""
Session data models.
"""
import json
from dataclasses import dataclass, field, fields, replace as dc_replace
from enum import Enum, auto
from typing import Any, Dict, FrozenSet, Optional

from .exceptions import MalformedRecord

# Mongo-backed deployments key records by ``_id`` instead of ``id``
ID_KEYS = ("id", "_id")
_BOOKKEEPING = ("extra", "id_key", "explicit_nulls")


class SessionStatus(Enum):
    """Where the session state machine currently is."""
    INITIALIZING = auto()
    UNAUTHENTICATED = auto()
    AUTHENTICATED = auto()


@dataclass(frozen=True)
class UserProfile:
    """
    Profile record of the signed-in user, as returned by the backend.

    The record round-trips exactly through ``to_dict``/``from_dict``:
    keys the client does not model are kept in ``extra``, the key the
    identifier came from is kept in ``id_key``, and modelled fields the
    backend sent as ``null`` are listed in ``explicit_nulls``.
    """
    id: Any
    name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    goal: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, hash=False)
    id_key: str = "id"
    explicit_nulls: FrozenSet[str] = frozenset()

    @classmethod
    def from_dict(cls, data: Any) -> 'UserProfile':
        """Build a profile from a decoded JSON object."""
        if not isinstance(data, dict):
            raise MalformedRecord(f"Profile must be an object, got {type(data).__name__}")

        id_key = next((k for k in ID_KEYS if data.get(k) is not None), None)
        if id_key is None:
            raise MalformedRecord("Profile has no id", details={"keys": sorted(data)})

        known = {f.name for f in fields(cls)} - set(_BOOKKEEPING) - {"id"}
        return cls(
            id=data[id_key],
            **{k: v for k, v in data.items() if k in known},
            extra={k: v for k, v in data.items() if k not in known and k != id_key},
            id_key=id_key,
            explicit_nulls=frozenset(k for k in known if k in data and data[k] is None),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict; unset fields are omitted unless sent as null."""
        data: Dict[str, Any] = dict(self.extra)
        data[self.id_key] = self.id
        for f in fields(self):
            if f.name == "id" or f.name in _BOOKKEEPING:
                continue
            value = getattr(self, f.name)
            if value is not None or f.name in self.explicit_nulls:
                data[f.name] = value
        return data

    @classmethod
    def from_json(cls, text: str) -> 'UserProfile':
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise MalformedRecord(f"Stored profile is not valid JSON: {e}") from e
        return cls.from_dict(data)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True)

    def replace(self, **changes: Any) -> 'UserProfile':
        """Return a copy with the given fields changed."""
        return dc_replace(self, **changes)


@dataclass(frozen=True)
class Session:
    """
    Immutable snapshot of the session.

    ``token`` and ``user`` are set together, and only when authenticated.
    """
    status: SessionStatus
    token: Optional[str] = None
    user: Optional[UserProfile] = None

    def __post_init__(self):
        has_credentials = self.token is not None and self.user is not None
        has_any = self.token is not None or self.user is not None
        if self.status is SessionStatus.AUTHENTICATED and not has_credentials:
            raise ValueError("Authenticated session requires both token and user")
        if self.status is not SessionStatus.AUTHENTICATED and has_any:
            raise ValueError(f"{self.status.name} session cannot carry credentials")

    @classmethod
    def initializing(cls) -> 'Session':
        return cls(SessionStatus.INITIALIZING)

    @classmethod
    def unauthenticated(cls) -> 'Session':
        return cls(SessionStatus.UNAUTHENTICATED)

    @classmethod
    def authenticated(cls, token: str, user: UserProfile) -> 'Session':
        return cls(SessionStatus.AUTHENTICATED, token=token, user=user)

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.status is SessionStatus.INITIALIZING

    def __repr__(self) -> str:
        token = "***" if self.token else None
        user_id = self.user.id if self.user else None
        return f"Session(status={self.status.name}, token={token}, user={user_id})"
