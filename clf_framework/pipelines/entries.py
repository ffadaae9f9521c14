"""Pipeline entries: what one pipeline position holds.

Single(stage)         one stage
Ensemble(members)     several stages trained side by side on identical input; a member
                      may itself be a sub-ensemble, paired with one dataset of a collection
FanOut(branches)      produced by training on a collection: one fitted branch per dataset
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Union

from clf_framework.stages.base import Predictor, Stage
from clf_framework.stages.errors import StructuralError


@dataclass(frozen=True)
class Single:
    stage: Stage

    @property
    def joint(self) -> bool:
        return self.stage.consumes_collection


@dataclass(frozen=True)
class Ensemble:
    members: tuple[Union[Stage, "Ensemble"], ...]

    @property
    def joint(self) -> bool:
        return all(s.consumes_collection for s in iter_stages(self))

    @property
    def nested(self) -> bool:
        return any(isinstance(m, Ensemble) for m in self.members)


@dataclass(frozen=True)
class FanOut:
    branches: tuple[Union[Single, Ensemble, "FanOut"], ...]

    @property
    def joint(self) -> bool:
        return False


Entry = Union[Single, Ensemble, FanOut]


def iter_stages(entry: Entry | Stage) -> Iterator[Stage]:
    """All stages held by an entry, depth first."""
    if isinstance(entry, Stage):
        yield entry
    elif isinstance(entry, Single):
        yield entry.stage
    elif isinstance(entry, Ensemble):
        for m in entry.members:
            yield from iter_stages(m)
    else:
        for b in entry.branches:
            yield from iter_stages(b)


def as_branch(member: Stage | Ensemble) -> Single | Ensemble:
    """Ensemble member as a stand-alone entry."""
    return Single(member) if isinstance(member, Stage) else member


def _ensemble(items: Any, position: int, depth: int) -> Ensemble:
    if len(items) == 0:
        raise StructuralError(f"Position {position}: empty ensemble")
    members: list[Stage | Ensemble] = []
    for item in items:
        if isinstance(item, Stage):
            members.append(item)
        elif isinstance(item, (list, tuple)) and depth == 0:
            members.append(_ensemble(item, position, depth + 1))
        else:
            raise StructuralError(
                f"Position {position}: invalid ensemble member {type(item).__name__}; expected a Stage"
            )
    ensemble = Ensemble(tuple(members))
    flags = {s.consumes_collection for s in iter_stages(ensemble)}
    if len(flags) > 1:
        raise StructuralError(f"Position {position}: ensemble mixes joint-mode and per-dataset stages")
    return ensemble


def make_entry(item: Any, position: int) -> Entry:
    """Stage -> Single, list -> Ensemble; existing entries pass through."""
    if isinstance(item, (Single, Ensemble, FanOut)):
        return item
    if isinstance(item, Stage):
        return Single(item)
    if isinstance(item, (list, tuple)):
        return _ensemble(item, position, depth=0)
    raise StructuralError(
        f"Position {position}: invalid pipeline entry {type(item).__name__}; expected a Stage or a list of Stages"
    )


def is_predictor_entry(entry: Entry) -> bool:
    """True when every stage the entry holds is a Predictor."""
    return all(isinstance(s, Predictor) for s in iter_stages(entry))


def entry_label(entry: Entry | Stage) -> str:
    if isinstance(entry, Stage):
        return type(entry).__name__
    if isinstance(entry, Single):
        return type(entry.stage).__name__
    if isinstance(entry, Ensemble):
        return "[" + " ".join(entry_label(m) for m in entry.members) + "]"
    return "<" + " ".join(entry_label(b) for b in entry.branches) + ">"
