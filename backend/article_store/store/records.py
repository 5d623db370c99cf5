"""
Record types shared by both store backends.

The merge rules for account info live here so the relational and the file
backend apply exactly the same accumulator semantics.
"""
import json
import math
import time
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, Optional

from .errors import ValidationError

DEFAULT_FILE_TYPE = 'application/octet-stream'

BLOB_KINDS = ('html', 'resource', 'asset', 'debug')


def now_seconds() -> int:
    """Current wall-clock time as Unix seconds."""
    return int(round(time.time()))


def to_number(value: Any, fallback=0):
    """Coerce loosely typed upstream numbers, returning ``fallback`` when unusable."""
    if value is None or isinstance(value, (dict, list)):
        return fallback
    if isinstance(value, bool):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number):
        return fallback
    return int(number) if number.is_integer() else number


def to_int(value: Any, fallback: int = 0) -> int:
    return int(to_number(value, fallback))


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else to_int(value)


@dataclass
class BlobRef:
    """Pointer to content-addressed bytes under the blob root."""

    kind: str
    sha256: str
    file_type: str
    size: int
    relative_path: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BlobRef':
        return cls(
            kind=data['kind'],
            sha256=data['sha256'],
            file_type=data.get('file_type') or DEFAULT_FILE_TYPE,
            size=to_int(data.get('size')),
            relative_path=data['relative_path'],
        )


@dataclass
class InfoRecord:
    """Aggregate state for one tracked account.

    ``count`` and ``articles`` are accumulators: writers pass the number of
    batches/articles they just added, never a running total.
    """

    fakeid: str
    completed: bool = False
    count: int = 0
    articles: int = 0
    nickname: Optional[str] = None
    round_head_img: Optional[str] = None
    total_count: int = 0
    create_time: Optional[int] = None
    update_time: Optional[int] = None
    last_update_time: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InfoRecord':
        fakeid = data.get('fakeid')
        if not fakeid:
            raise ValidationError('Invalid info payload')
        return cls(
            fakeid=str(fakeid),
            completed=bool(data.get('completed')),
            count=to_int(data.get('count')),
            articles=to_int(data.get('articles')),
            nickname=data.get('nickname'),
            round_head_img=data.get('round_head_img'),
            total_count=to_int(data.get('total_count')),
            create_time=_optional_int(data.get('create_time')),
            update_time=_optional_int(data.get('update_time')),
            last_update_time=_optional_int(data.get('last_update_time')),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # unset optional fields are left out of the wire shape
        for key in ('nickname', 'round_head_img', 'last_update_time'):
            if not data[key] and data[key] != 0:
                data.pop(key)
        return data

    def columns(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('fakeid')
        return data


def merge_info(existing: Optional[InfoRecord], update: InfoRecord, ts: int) -> InfoRecord:
    """Fold an info update into the stored row.

    ``completed`` latches true, ``count``/``articles`` are summed, display
    fields and ``total_count`` take the new value. ``last_update_time`` is only
    taken from the update when the row is created.
    """
    if existing is None:
        return replace(update, create_time=ts, update_time=ts)

    return replace(
        existing,
        completed=existing.completed or update.completed,
        count=existing.count + update.count,
        articles=existing.articles + update.articles,
        nickname=update.nickname,
        round_head_img=update.round_head_img,
        total_count=update.total_count,
        update_time=ts,
    )


def reset_info(existing: Optional[InfoRecord], incoming: InfoRecord, ts: int) -> InfoRecord:
    """Build the row written by a bulk import: progress counters start over."""
    return InfoRecord(
        fakeid=incoming.fakeid,
        completed=False,
        count=0,
        articles=0,
        nickname=incoming.nickname,
        round_head_img=incoming.round_head_img,
        total_count=0,
        create_time=existing.create_time if existing and existing.create_time is not None else ts,
        update_time=ts,
        last_update_time=existing.last_update_time if existing else None,
    )


@dataclass
class ArticleRecord:
    """One archived article.

    The identifying columns are typed; everything else the upstream sent is
    kept untouched in ``extra`` and written back on serialization.
    """

    CORE_FIELDS = ('fakeid', 'aid', 'link', 'create_time', 'is_deleted')

    fakeid: Any
    aid: Any
    link: Any
    create_time: Any = 0
    is_deleted: bool = False
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ArticleRecord':
        return cls(
            fakeid=data.get('fakeid'),
            aid=data.get('aid'),
            link=data.get('link'),
            create_time=to_number(data.get('create_time')),
            is_deleted=bool(data.get('is_deleted')),
            extra={k: v for k, v in data.items() if k not in cls.CORE_FIELDS},
        )

    @property
    def is_valid(self) -> bool:
        return bool(self.fakeid and self.aid and self.link)

    def validate(self) -> None:
        if not self.is_valid:
            raise ValidationError('Invalid article payload')

    @property
    def key(self) -> str:
        """Key used by the JSON documents (``fakeid:aid``)."""
        return f'{self.fakeid}:{self.aid}'

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update(
            fakeid=self.fakeid,
            aid=self.aid,
            link=self.link,
            create_time=self.create_time,
            is_deleted=self.is_deleted,
        )
        return data

    def to_payload(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
