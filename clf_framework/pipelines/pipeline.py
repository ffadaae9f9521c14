"""Pipeline (classification procedure): an ordered sequence of stages.

The output of each stage is the input of the next. Each position holds a single
stage or an ensemble, and data is a single dataset or a collection of datasets
(e.g. subjects/sessions):

* single stage, single dataset      -> train once
* single stage, collection          -> fan out: one independent fitted copy per dataset
* ensemble, single dataset          -> every member trained on identical input;
                                       member outputs travel on as a collection
* ensemble of K, collection of M    -> pairwise when K == M, broadcast when K == 1,
                                       StructuralError otherwise

Joint-mode stages (``consumes_collection``, e.g. transfer learners) are never fanned
out; they are trained once on the whole collection. The terminal position must be a
predictor; predict() turns its output into label decisions.
"""

from __future__ import annotations

import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Sequence

import numpy as np

from clf_framework.datasets.base import broadcast_labels, is_collection, is_empty, n_examples
from clf_framework.stages.base import Stage
from clf_framework.stages.errors import InvalidInputError, StructuralError

from .entries import (
    Ensemble,
    Entry,
    FanOut,
    Single,
    as_branch,
    entry_label,
    is_predictor_entry,
    iter_stages,
    make_entry,
)

logger = logging.getLogger(__name__)


class Pipeline:
    """Threads train/test/predict through an ordered list of stages or ensembles."""

    def __init__(
        self,
        stages: Any,
        verbose: bool | None = None,
        max_parallel: int | None = None,
    ) -> None:
        if isinstance(stages, Pipeline):
            # a copied pipeline keeps its settings unless they are overridden
            verbose = stages.verbose if verbose is None else verbose
            max_parallel = stages.max_parallel if max_parallel is None else max_parallel
            stages = copy.deepcopy(list(stages.stages))
        elif isinstance(stages, (Stage, Single, Ensemble, FanOut)):
            stages = [stages]
        if not isinstance(stages, (list, tuple)) or len(stages) == 0:
            raise StructuralError("Pipeline stages not specified")

        entries = tuple(make_entry(item, c) for c, item in enumerate(stages))
        if not is_predictor_entry(entries[-1]):
            raise StructuralError(
                f"Pipeline should end with a predictor; got {entry_label(entries[-1])}"
            )
        for entry in entries:
            for stage in iter_stages(entry):
                stage.check_requirements()

        self._entries: tuple[Entry, ...] = entries
        self.verbose = bool(verbose)
        self.max_parallel = max_parallel or 0

    @property
    def stages(self) -> tuple[Entry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def is_fitted(self) -> bool:
        return all(s.is_fitted for e in self._entries for s in iter_stages(e))

    def _log(self, msg: str, *args: Any) -> None:
        (logger.info if self.verbose else logger.debug)(msg, *args)

    def _map(self, fn: Callable[..., Any], *iterables: Sequence[Any]) -> list[Any]:
        """Apply fn over independent branches, in parallel when max_parallel > 1. Order is preserved."""
        args = list(zip(*iterables))
        if self.max_parallel > 1 and len(args) > 1:
            with ThreadPoolExecutor(max_workers=min(self.max_parallel, len(args))) as executor:
                return list(executor.map(lambda a: fn(*a), args))
        return [fn(*a) for a in args]

    def _branches(self, entry: Single | Ensemble, n_datasets: int, position: int) -> list[Entry]:
        """One branch per dataset of a collection (fan-out dispatch)."""
        if isinstance(entry, Single):
            return [entry] * n_datasets
        k = len(entry.members)
        if k == n_datasets:
            return [as_branch(m) for m in entry.members]
        if k == 1:
            return [as_branch(entry.members[0])] * n_datasets
        raise StructuralError(
            f"Position {position}: cannot pair {k} ensemble members with {n_datasets} datasets "
            f"({entry_label(entry)})"
        )

    def _invoke(self, stage: Stage, method: str, position: int, *args: Any) -> Any:
        try:
            return getattr(stage, method)(*args)
        except InvalidInputError as e:
            raise type(e)(f"Position {position} ({type(stage).__name__}): {e}") from e

    # --- training ---------------------------------------------------------

    def train(self, data: Any, labels: Any) -> "Pipeline":
        """Return a new pipeline whose entries are fitted on data/labels.

        The receiver is not modified. Fails with StructuralError on a dataset/stage
        count mismatch and InvalidInputError when a stage rejects its input.
        """
        self._log("[PIPELINE] Training %s on %s", self.signature(), _describe(data))
        entries = list(self._entries)
        last = len(entries) - 1
        for c, entry in enumerate(entries):
            entries[c], data = self._train_entry(entry, data, labels, c, transform=c < last)
        return Pipeline(entries, verbose=self.verbose, max_parallel=self.max_parallel)

    def _train_entry(
        self, entry: Entry, data: Any, labels: Any, position: int, transform: bool
    ) -> tuple[Entry, Any]:
        if isinstance(entry, FanOut):
            # retraining an already fanned-out position: branches pair with datasets
            self._check_fanout(entry, data, position)
            results = self._map(
                lambda b, d, lab: self._train_entry(b, d, lab, position, transform),
                entry.branches, data, broadcast_labels(labels, len(data)),
            )
            return FanOut(tuple(r[0] for r in results)), [r[1] for r in results] if transform else None

        if is_collection(data) and not entry.joint:
            branches = self._branches(entry, len(data), position)
            self._log("[FANOUT] Position %d: %d branches for %d datasets", position, len(branches), len(data))
            results = self._map(
                lambda b, d, lab: self._train_entry(b, d, lab, position, transform),
                branches, list(data), broadcast_labels(labels, len(data)),
            )
            return FanOut(tuple(r[0] for r in results)), [r[1] for r in results] if transform else None

        if isinstance(entry, Single):
            fitted = self._fit_stage(entry.stage, data, labels, position)
            out = self._invoke(fitted, "test", position, data) if transform else None
            return Single(fitted), out

        if entry.nested:
            raise StructuralError(
                f"Position {position}: per-dataset sub-ensembles need a dataset collection"
            )
        members = self._map(lambda m: self._fit_stage(m, data, labels, position), entry.members)
        out = self._map(lambda m: self._invoke(m, "test", position, data), members) if transform else None
        return Ensemble(tuple(members)), out

    def _fit_stage(self, stage: Stage, data: Any, labels: Any, position: int) -> Stage:
        if self.verbose and not stage.verbose:
            stage = copy.copy(stage)
            stage.verbose = True
        fitted = self._invoke(stage, "train", position, data, labels)
        self._log("[PIPELINE] Position %d: trained %s %s", position, type(stage).__name__, fitted.summary())
        return fitted

    def _check_fanout(self, entry: FanOut, data: Any, position: int) -> None:
        n = len(data) if is_collection(data) else 1
        if not is_collection(data) or n != len(entry.branches):
            raise StructuralError(
                f"Position {position}: {len(entry.branches)} fitted branches but {n} dataset(s) given"
            )

    # --- inference --------------------------------------------------------

    def test(self, data: Any) -> Any:
        """Propagate data through all fitted stages; returns the terminal stage's native output."""
        if is_empty(data):
            return [] if is_collection(data) else np.empty((0, 0))
        for c, entry in enumerate(self._entries):
            data = self._apply_entry(entry, data, "test", c)
        return data

    def predict(self, data: Any) -> Any:
        """test() through all but the last position, then the terminal predictor's predict()."""
        if is_empty(data):
            return [] if is_collection(data) else np.empty(0)
        last = len(self._entries) - 1
        for c, entry in enumerate(self._entries[:-1]):
            data = self._apply_entry(entry, data, "test", c)
        return self._apply_entry(self._entries[last], data, "predict", last)

    def _apply_entry(self, entry: Entry, data: Any, method: str, position: int) -> Any:
        if isinstance(entry, FanOut):
            self._check_fanout(entry, data, position)
            return self._map(lambda b, d: self._apply_entry(b, d, method, position), entry.branches, data)

        if is_collection(data) and not entry.joint:
            branches = self._branches(entry, len(data), position)
            return self._map(lambda b, d: self._apply_entry(b, d, method, position), branches, list(data))

        if isinstance(entry, Single):
            return self._invoke(entry.stage, method, position, data)

        if entry.nested:
            raise StructuralError(
                f"Position {position}: per-dataset sub-ensembles need a dataset collection"
            )
        return self._map(lambda m: self._invoke(m, method, position, data), entry.members)

    # --- introspection ----------------------------------------------------

    def signature(self) -> str:
        """Stage type names in order, e.g. '{ PCAnalyzer RegularizedFDA }'."""
        return "{ " + " ".join(entry_label(e) for e in self._entries) + " }"

    def get_model(self) -> Any:
        """Fitted parameters of the terminal predictor (a list for ensembles and fan-outs)."""
        return _model_of(self._entries[-1])

    def __repr__(self) -> str:
        return f"Pipeline({self.signature()}, fitted={self.is_fitted}, verbose={self.verbose})"


def _model_of(entry: Entry | Stage) -> Any:
    if isinstance(entry, Stage):
        return entry.get_model()
    if isinstance(entry, Single):
        return entry.stage.get_model()
    if isinstance(entry, Ensemble):
        return [_model_of(m) for m in entry.members]
    return [_model_of(b) for b in entry.branches]


def _describe(data: Any) -> str:
    if is_collection(data):
        return f"collection of {len(data)} datasets"
    return f"{n_examples(data)} examples"
