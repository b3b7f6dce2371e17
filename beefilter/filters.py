"""Filter trees that decide whether a task matches a filter expression.

Filters work on any task object with these attributes:

``summary`` (str), ``status`` (str), ``tags`` (iterable of str),
``project`` (str or None), ``date_created`` (aware datetime),
``date_due`` and ``date_completed`` (aware datetime or None),
``id`` (int or None), ``uuid`` (uuid.UUID) and ``depends``
(collection of uuid.UUID).
"""

from __future__ import annotations

import logging
import uuid as uuid_module
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

logger = logging.getLogger(__name__)


class FilterKind(Enum):
    """The kind of a filter node."""

    AND = "And"
    OR = "Or"
    ROOT = "Root"
    STATUS = "Status"
    PROJECT = "Project"
    DATE_END = "DateEnd"
    DATE_CREATED = "DateCreated"
    DATE_DUE = "DateDue"
    STRING = "String"
    TAG = "Tag"
    TASK_ID = "TaskId"
    DEPENDS_ON = "DependsOn"
    UUID = "Uuid"
    XOR = "Xor"

    def __str__(self) -> str:
        return self.value


class DateDueFilterType(Enum):
    """How a due-date filter compares against its time."""

    DAY = "Day"
    """The task is due any time during the same day."""
    BEFORE = "Before"
    AFTER = "After"


def _indent(text: str, indent: int) -> str:
    prefix = "|" + " " * (indent - 1)
    return "\n".join(prefix + line for line in text.splitlines())


def _format_time(value: datetime) -> str:
    text = value.strftime("%Y-%m-%d %H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None:
        return text
    total = int(offset.total_seconds())
    sign = "-" if total < 0 else "+"
    hours, remainder = divmod(abs(total), 3600)
    return f"{text} {sign}{hours:02d}:{remainder // 60:02d}"


_REGISTRY: dict[str, type[Filter]] = {}


class Filter:
    """Base class of every filter node."""

    kind: ClassVar[FilterKind]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        _REGISTRY[cls.__name__] = cls

    def validate_task(self, task: Any) -> bool:
        """Return True if the task matches this filter."""
        raise NotImplementedError

    def add_child(self, child: Filter) -> None:
        """Append a child filter; only composite filters accept children."""
        raise TypeError(f"cannot add a child to a {type(self).__name__}")

    def convert_id_to_uuid(self, id_to_uuid: Mapping[int, uuid_module.UUID]) -> None:
        """Resolve task ids to UUIDs where the filter refers to tasks by id."""

    def __iter__(self) -> Iterator[Filter]:
        """Yield this filter and then every filter below it, depth first."""
        yield self

    def to_dict(self) -> dict[str, Any]:
        """Return a tagged, JSON-compatible representation of this filter."""
        return {"type": type(self).__name__, "value": self._value()}

    def _value(self) -> dict[str, Any]:
        return {}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        raise NotImplementedError


def new_empty() -> Filter:
    """Return a filter that matches every task."""
    return RootFilter()


def filter_from_dict(data: Mapping[str, Any]) -> Filter:
    """Rebuild a filter from the output of Filter.to_dict."""
    try:
        type_name = data["type"]
    except (KeyError, TypeError) as exc:
        raise ValueError("filter data has no 'type'") from exc
    cls = _REGISTRY.get(type_name)
    if cls is None:
        raise ValueError(f"unknown filter type '{type_name}'")
    value = data.get("value") or {}
    try:
        return cls._from_value(value)
    except (KeyError, TypeError) as exc:
        raise ValueError(f"invalid data for filter type '{type_name}'") from exc


@dataclass
class RootFilter(Filter):
    """The empty filter, which matches everything."""

    kind: ClassVar[FilterKind] = FilterKind.ROOT

    def validate_task(self, task: Any) -> bool:
        return True

    def __str__(self) -> str:
        return str(self.kind)

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls()


@dataclass
class _CompositeFilter(Filter):
    children: list[Filter] = field(default_factory=list)

    _separator: ClassVar[str] = "\n"

    def _active_children(self) -> Iterator[Filter]:
        return (c for c in self.children if c.kind is not FilterKind.ROOT)

    def add_child(self, child: Filter) -> None:
        self.children.append(child)

    def convert_id_to_uuid(self, id_to_uuid: Mapping[int, uuid_module.UUID]) -> None:
        for child in self.children:
            child.convert_id_to_uuid(id_to_uuid)

    def __iter__(self) -> Iterator[Filter]:
        yield self
        for child in self.children:
            yield from child

    def __str__(self) -> str:
        body = "\n".join(str(c) for c in self.children)
        return f"{self.kind}:{self._separator}{_indent(body, 4)}"

    def _value(self) -> dict[str, Any]:
        return {"children": [c.to_dict() for c in self.children]}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(children=[filter_from_dict(c) for c in value.get("children", [])])


@dataclass
class AndFilter(_CompositeFilter):
    """Matches when every child matches."""

    kind: ClassVar[FilterKind] = FilterKind.AND

    def validate_task(self, task: Any) -> bool:
        return all(c.validate_task(task) for c in self._active_children())


@dataclass
class OrFilter(_CompositeFilter):
    """Matches when at least one child matches."""

    kind: ClassVar[FilterKind] = FilterKind.OR

    def validate_task(self, task: Any) -> bool:
        return any(c.validate_task(task) for c in self._active_children())


@dataclass
class XorFilter(_CompositeFilter):
    """Matches when exactly one child matches."""

    kind: ClassVar[FilterKind] = FilterKind.XOR
    _separator: ClassVar[str] = ""

    def validate_task(self, task: Any) -> bool:
        matches = 0
        for child in self._active_children():
            if child.validate_task(task):
                matches += 1
            if matches > 1:
                return False
        return matches == 1


@dataclass
class StringFilter(Filter):
    """Matches tasks whose summary contains the value, ignoring case."""

    value: str
    kind: ClassVar[FilterKind] = FilterKind.STRING

    def validate_task(self, task: Any) -> bool:
        return self.value.lower() in task.summary.lower()

    def __str__(self) -> str:
        return f"{self.kind}: {self.value}"

    def _value(self) -> dict[str, Any]:
        return {"value": self.value}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(value=value["value"])


@dataclass
class _BeforeAfterFilter(Filter):
    time: datetime
    before: bool

    def _compare(self, moment: datetime) -> bool:
        return moment < self.time if self.before else moment >= self.time

    def __str__(self) -> str:
        when = "before" if self.before else "after"
        return f"{self.kind}: {when}: {_format_time(self.time)}"

    def _value(self) -> dict[str, Any]:
        return {"time": self.time.isoformat(), "before": self.before}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(time=datetime.fromisoformat(value["time"]), before=bool(value["before"]))


@dataclass
class DateCreatedFilter(_BeforeAfterFilter):
    """Matches tasks created before, or at and after, a time."""

    kind: ClassVar[FilterKind] = FilterKind.DATE_CREATED

    def validate_task(self, task: Any) -> bool:
        return self._compare(task.date_created)


@dataclass
class DateEndFilter(_BeforeAfterFilter):
    """Matches completed tasks that ended before, or at and after, a time."""

    kind: ClassVar[FilterKind] = FilterKind.DATE_END

    def validate_task(self, task: Any) -> bool:
        completed = task.date_completed
        if completed is None:
            return False
        return self._compare(completed)


@dataclass
class DateDueFilter(Filter):
    """Matches tasks by their due date."""

    time: datetime
    type_when: DateDueFilterType
    kind: ClassVar[FilterKind] = FilterKind.DATE_DUE

    def validate_task(self, task: Any) -> bool:
        due = task.date_due
        if due is None:
            return False
        if self.type_when is DateDueFilterType.DAY:
            return due.astimezone().date() == self.time.astimezone().date()
        if self.type_when is DateDueFilterType.BEFORE:
            return due < self.time
        return due >= self.time

    def __str__(self) -> str:
        return f"{self.kind}: {self.type_when.value.lower()}: {_format_time(self.time)}"

    def _value(self) -> dict[str, Any]:
        return {"time": self.time.isoformat(), "type_when": self.type_when.value}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(
            time=datetime.fromisoformat(value["time"]),
            type_when=DateDueFilterType(value["type_when"]),
        )


@dataclass
class ProjectFilter(Filter):
    """Matches tasks whose project name starts with the given name."""

    name: str
    kind: ClassVar[FilterKind] = FilterKind.PROJECT

    def validate_task(self, task: Any) -> bool:
        project = task.project
        return project is not None and project.startswith(self.name)

    def __str__(self) -> str:
        return f"{self.kind}: {self.name}"

    def _value(self) -> dict[str, Any]:
        return {"name": {"name": self.name}}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(name=value["name"]["name"])


@dataclass
class StatusFilter(Filter):
    """Matches tasks with the given status."""

    status: str
    kind: ClassVar[FilterKind] = FilterKind.STATUS

    def validate_task(self, task: Any) -> bool:
        return self.status == task.status

    def __str__(self) -> str:
        return f"{self.kind}: {self.status}"

    def _value(self) -> dict[str, Any]:
        return {"status": self.status}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(status=value["status"])


@dataclass
class TagFilter(Filter):
    """Matches tasks that have (include) or lack (exclude) a tag."""

    include: bool
    tag_name: str
    kind: ClassVar[FilterKind] = FilterKind.TAG

    def validate_task(self, task: Any) -> bool:
        has_tag = self.tag_name in task.tags
        return has_tag if self.include else not has_tag

    def __str__(self) -> str:
        mode = "include" if self.include else "exclude"
        return f"{self.kind}: {self.tag_name}={mode}"

    def _value(self) -> dict[str, Any]:
        return {"include": self.include, "tag_name": self.tag_name}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(include=bool(value["include"]), tag_name=value["tag_name"])


@dataclass
class UuidFilter(Filter):
    """Matches the task with the given UUID."""

    uuid: uuid_module.UUID
    kind: ClassVar[FilterKind] = FilterKind.UUID

    def validate_task(self, task: Any) -> bool:
        return self.uuid == task.uuid

    def __str__(self) -> str:
        return f"{self.kind}: {self.uuid}"

    def _value(self) -> dict[str, Any]:
        return {"uuid": str(self.uuid)}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(uuid=uuid_module.UUID(value["uuid"]))


@dataclass
class TaskIdFilter(Filter):
    """Matches the task with the given id."""

    id: int
    kind: ClassVar[FilterKind] = FilterKind.TASK_ID

    def validate_task(self, task: Any) -> bool:
        return task.id is not None and task.id == self.id

    def __str__(self) -> str:
        return f"{self.kind}: {self.id}"

    def _value(self) -> dict[str, Any]:
        return {"id": self.id}

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        return cls(id=int(value["id"]))


@dataclass
class DependsOnFilter(Filter):
    """Matches tasks that depend on a given task, named by id or UUID."""

    id: int | None = None
    uuid: uuid_module.UUID | None = None
    kind: ClassVar[FilterKind] = FilterKind.DEPENDS_ON

    def validate_task(self, task: Any) -> bool:
        if self.uuid is None:
            raise ValueError("cannot validate a DependsOn filter without a UUID")
        return self.uuid in task.depends

    def convert_id_to_uuid(self, id_to_uuid: Mapping[int, uuid_module.UUID]) -> None:
        if self.uuid is not None:
            logger.debug("DependsOnFilter already has a UUID, no need to update it.")
            return
        if self.id is None:
            return
        found = id_to_uuid.get(self.id)
        if found is None:
            logger.warning(
                "Trying to map id %s in DependsOnFilter but couldn't find a matching UUID",
                self.id,
            )
        else:
            self.uuid = found

    def __str__(self) -> str:
        return f"{self.kind}: id({self.id}), uuid({self.uuid})"

    def _value(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "uuid": None if self.uuid is None else str(self.uuid),
        }

    @classmethod
    def _from_value(cls, value: Mapping[str, Any]) -> Filter:
        raw_uuid = value.get("uuid")
        raw_id = value.get("id")
        return cls(
            id=None if raw_id is None else int(raw_id),
            uuid=None if raw_uuid is None else uuid_module.UUID(raw_uuid),
        )