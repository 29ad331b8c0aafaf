"""Policy tags attached to resources."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Mapping, Optional, Union

POLICY_ANNOTATION_PREFIX: str = "kubesync.io/"

_TRUE_VALUES: frozenset[str] = frozenset({"true", "yes", "1"})


class Policy(str, Enum):
    """Tags the planner acts on. Other tags are carried but never consulted."""

    IGNORE = "ignore"


PolicyTag = Union[Policy, str]


def _tag_name(tag: object) -> object:
    if isinstance(tag, Policy):
        return tag.value
    return tag


@dataclass(slots=True, frozen=True)
class PolicySet:
    """Immutable set of string tags. Membership is the only operation."""

    tags: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", frozenset(str(_tag_name(t)) for t in self.tags))

    @classmethod
    def of(cls, *tags: PolicyTag) -> PolicySet:
        return cls(frozenset(str(_tag_name(t)) for t in tags))

    @classmethod
    def from_annotations(cls, annotations: Optional[Mapping[str, object]]) -> PolicySet:
        """
        Build a PolicySet from object annotations.

        An annotation `kubesync.io/<tag>` whose value is "true" sets <tag>,
        whatever <tag> is. Other values are ignored.
        """
        if not annotations:
            return cls()

        tags: set[str] = set()
        for key, value in annotations.items():
            if not isinstance(key, str) or not key.startswith(POLICY_ANNOTATION_PREFIX):
                continue
            if str(value).strip().lower() not in _TRUE_VALUES:
                continue
            name = key[len(POLICY_ANNOTATION_PREFIX):]
            if name:
                tags.add(name)
        return cls(frozenset(tags))

    def contains(self, tag: PolicyTag) -> bool:
        return _tag_name(tag) in self.tags

    def __contains__(self, tag: object) -> bool:
        return _tag_name(tag) in self.tags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.tags))
