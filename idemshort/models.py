import json
from dataclasses import dataclass, field
from datetime import datetime, UTC
from enum import StrEnum
from typing import Any, Self


# fmt: off
@dataclass(frozen=True)
class ShortURLModel:
    shortcode: str                                                          # Unique short identifier of shortened URL
    target: str                                                             # Original long URL, stored byte-for-byte
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))  # Creation timestamp (UTC)

    def to_dict(self) -> dict[str, Any]:
        return {
            'shortcode': self.shortcode,
            'target': self.target,
            'created_at': self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            shortcode=data['shortcode'],
            target=data['target'],
            created_at=datetime.fromisoformat(data['created_at']),
        )


@dataclass(frozen=True)
class ShortenResult:
    shortcode: str   # Generated (or replayed) shortcode
    target_url: str  # Original URL as submitted by the caller
    message: str     # Human readable outcome

    def to_dict(self) -> dict[str, Any]:
        return {'shortcode': self.shortcode, 'target_url': self.target_url, 'message': self.message}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(shortcode=data['shortcode'], target_url=data['target_url'], message=data['message'])
# fmt: on


def type_tag(value_type: type) -> str:
    return f'{value_type.__module__}.{value_type.__qualname__}'


@dataclass(frozen=True)
class CacheEnvelope:
    """Serializable wrapper for heterogeneous cache values.

    The type tag records which type produced the payload, so a reader can
    reject a value stored by an unrelated caller instead of casting it blindly.
    Values are either JSON-native or expose `to_dict()`/`from_dict()`.

    Example:
        >>> envelope = CacheEnvelope.wrap(ShortenResult('abc', 'https://x.io', 'ok'))
        >>> CacheEnvelope.loads(envelope.dumps()).unwrap(ShortenResult)
        ShortenResult(shortcode='abc', target_url='https://x.io', message='ok')
    """

    type: str
    value: Any

    @classmethod
    def wrap(cls, value: Any) -> Self:
        payload = value.to_dict() if hasattr(value, 'to_dict') else value
        return cls(type=type_tag(type(value)), value=payload)

    def unwrap(self, value_type: type | None = None) -> Any:
        if value_type is None:
            return self.value
        if self.type != type_tag(value_type):
            raise TypeError(f'Cached value has type {self.type!r}, expected {type_tag(value_type)!r}.')
        if hasattr(value_type, 'from_dict'):
            return value_type.from_dict(self.value)
        return self.value

    def dumps(self) -> str:
        return json.dumps({'type': self.type, 'value': self.value}, separators=(',', ':'), ensure_ascii=False)

    @classmethod
    def loads(cls, blob: str | bytes) -> Self:
        data = json.loads(blob)
        return cls(type=data['type'], value=data['value'])


class CacheStatus(StrEnum):
    HIT = 'hit'
    MISS = 'miss'
    STORED = 'stored'
    EXISTS = 'exists'  # set-if-absent lost against an existing entry
    SKIPPED = 'skipped'  # non-cacheable TTL
    DELETED = 'deleted'
    ERROR = 'error'  # backing store unreachable or entry unreadable


@dataclass(frozen=True)
class CacheResult:
    """Explicit outcome of a cache operation.

    Cache operations never raise on backing store failures; they return a
    result with status ERROR and the original exception attached.
    """

    status: CacheStatus
    value: Any = None
    error: Exception | None = None

    @property
    def hit(self) -> bool:
        return self.status is CacheStatus.HIT

    @property
    def ok(self) -> bool:
        return self.status is not CacheStatus.ERROR
