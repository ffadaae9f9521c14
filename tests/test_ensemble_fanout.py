"""Ensembles, multi-dataset fan-out and joint-mode (transfer) stages."""

import numpy as np
import pytest

from clf_framework.classifiers import LDAClassifier, RegularizedFDA
from clf_framework.datasets import make_separable_binary, make_subject_collection
from clf_framework.domain_adaptation import PooledZScore
from clf_framework.pipelines import Ensemble, FanOut, Pipeline, Single
from clf_framework.preprocessing import PCAnalyzer, ZScoreStandardizer
from clf_framework.stages import StructuralError


@pytest.fixture
def binary():
    return make_separable_binary(n_examples=10, n_features=4, random_state=42)


@pytest.fixture
def subjects():
    return make_subject_collection(n_subjects=3, n_examples=20, n_features=4, random_state=3)


def test_classifier_ensemble_trains_independent_members(binary):
    X, y = binary
    members = [
        RegularizedFDA(kernel="linear"),
        RegularizedFDA(kernel="rbf", kernel_parameter=0.5, C=10.0),
        LDAClassifier(),
    ]
    fitted = Pipeline([PCAnalyzer(proportion=2), members]).train(X, y)
    entry = fitted.stages[-1]
    assert isinstance(entry, Ensemble)
    assert len(entry.members) == 3
    assert all(m.is_fitted for m in entry.members)
    assert all(f is not m for f, m in zip(entry.members, members))
    assert len({id(m) for m in entry.members}) == 3

    posts = fitted.test(X)
    assert isinstance(posts, list) and len(posts) == 3
    assert all(p.shape == (10, 2) for p in posts)
    preds = fitted.predict(X)
    assert len(preds) == 3 and all(p.shape == (10,) for p in preds)
    assert len(fitted.get_model()) == 3
    assert fitted.signature() == "{ PCAnalyzer [RegularizedFDA RegularizedFDA LDAClassifier] }"


def test_ensemble_members_differ_and_match_standalone_training(binary):
    X, y = binary
    members = [
        RegularizedFDA(kernel="linear"),
        RegularizedFDA(kernel="rbf", kernel_parameter=0.5, C=10.0),
        LDAClassifier(),
    ]
    fitted = Pipeline([PCAnalyzer(proportion=2), members]).train(X, y)
    Z = PCAnalyzer(proportion=2).train(X, y).test(X)
    linear, rbf, lda = fitted.stages[-1].members

    # identical input, different configurations
    assert not np.allclose(linear.decision_function(Z), rbf.decision_function(Z))

    for member, config in zip((linear, rbf), members[:2]):
        alone = config.train(Z, y)
        np.testing.assert_allclose(member.decision_function(Z), alone.decision_function(Z))
        np.testing.assert_array_equal(member.test(Z), alone.test(Z))
    np.testing.assert_allclose(lda.test(Z), members[2].train(Z, y).test(Z))


def test_ensemble_outputs_travel_as_collection(binary):
    X, y = binary
    fitted = Pipeline([[PCAnalyzer(proportion=1), PCAnalyzer(proportion=2)], RegularizedFDA()]).train(X, y)
    assert isinstance(fitted.stages[0], Ensemble)
    clf_entry = fitted.stages[1]
    assert isinstance(clf_entry, FanOut) and len(clf_entry.branches) == 2
    assert [b.stage.n_features_in_ for b in clf_entry.branches] == [1, 2]
    posts = fitted.test(X)
    assert [p.shape for p in posts] == [(10, 2), (10, 2)]
    assert [p.shape for p in fitted.predict(X)] == [(10,), (10,)]


def test_single_stage_fans_out_per_dataset(subjects):
    datasets, labels = subjects
    fitted = Pipeline([ZScoreStandardizer(), RegularizedFDA()]).train(datasets, labels)
    for entry in fitted.stages:
        assert isinstance(entry, FanOut) and len(entry.branches) == 3
    means = [b.stage.mean_ for b in fitted.stages[0].branches]
    assert not np.allclose(means[0], means[1])
    preds = fitted.predict(datasets)
    assert len(preds) == 3
    for pred, lab in zip(preds, labels):
        assert np.mean(pred == lab) >= 0.9


def test_fanout_count_mismatch_at_train(subjects):
    datasets, labels = subjects
    pipe = Pipeline([[ZScoreStandardizer(), ZScoreStandardizer()], RegularizedFDA()])
    with pytest.raises(StructuralError, match="cannot pair 2 ensemble members with 3 datasets"):
        pipe.train(datasets, labels)


def test_fanout_count_mismatch_at_test(subjects):
    datasets, labels = subjects
    fitted = Pipeline([ZScoreStandardizer(), RegularizedFDA()]).train(datasets, labels)
    with pytest.raises(StructuralError, match="3 fitted branches but 2 dataset"):
        fitted.test(datasets[:2])
    with pytest.raises(StructuralError, match="3 fitted branches but 1 dataset"):
        fitted.test(datasets[0])


def test_label_collection_length_must_match(subjects):
    datasets, labels = subjects
    with pytest.raises(StructuralError, match="label vectors"):
        Pipeline([ZScoreStandardizer(), RegularizedFDA()]).train(datasets, labels[:2])


def test_pairwise_ensemble_against_collection(subjects):
    datasets, labels = subjects
    pcas = [PCAnalyzer(proportion=1), PCAnalyzer(proportion=2), PCAnalyzer(proportion=3)]
    fitted = Pipeline([pcas, RegularizedFDA()]).train(datasets, labels)
    first = fitted.stages[0]
    assert isinstance(first, FanOut)
    assert [b.stage.n_components_ for b in first.branches] == [1, 2, 3]
    assert [p.shape for p in fitted.test(datasets)] == [(20, 2)] * 3


def test_length_one_ensemble_broadcasts(subjects):
    datasets, labels = subjects
    fitted = Pipeline([[ZScoreStandardizer()], RegularizedFDA()]).train(datasets, labels)
    first = fitted.stages[0]
    assert isinstance(first, FanOut) and len(first.branches) == 3
    assert len({id(b.stage) for b in first.branches}) == 3


def test_per_dataset_sub_ensembles(subjects):
    datasets, labels = subjects
    sub = [[PCAnalyzer(proportion=1), PCAnalyzer(proportion=2)] for _ in range(3)]
    fitted = Pipeline([sub, RegularizedFDA()]).train(datasets, labels)
    first = fitted.stages[0]
    assert isinstance(first, FanOut)
    assert all(isinstance(b, Ensemble) and len(b.members) == 2 for b in first.branches)
    out = fitted.test(datasets)
    assert len(out) == 3 and all(len(o) == 2 for o in out)
    assert out[0][1].shape == (20, 2)


def test_sub_ensembles_need_a_collection(binary):
    X, y = binary
    pipe = Pipeline([[[PCAnalyzer(proportion=1)], [PCAnalyzer(proportion=2)]], RegularizedFDA()])
    with pytest.raises(StructuralError, match="need a dataset collection"):
        pipe.train(X, y)


def test_joint_stage_sees_whole_collection(subjects):
    datasets, labels = subjects
    fitted = Pipeline([PooledZScore(), RegularizedFDA()]).train(datasets, labels)
    joint = fitted.stages[0]
    assert isinstance(joint, Single)
    assert joint.stage.n_datasets_ == 3
    assert isinstance(fitted.stages[1], FanOut)

    transformed = joint.stage.test(datasets)
    pooled = np.vstack(transformed)
    np.testing.assert_allclose(pooled.mean(axis=0), 0.0, atol=1e-10)
    np.testing.assert_allclose(pooled.std(axis=0), 1.0, atol=1e-10)
    assert len(fitted.predict(datasets)) == 3


def test_joint_stage_on_single_dataset(binary):
    X, y = binary
    fitted = Pipeline([PooledZScore(), RegularizedFDA()]).train(X, y)
    assert fitted.stages[0].stage.n_datasets_ == 1
    assert fitted.predict(X).shape == (10,)


def test_ensemble_cannot_mix_joint_and_per_dataset_stages():
    with pytest.raises(StructuralError, match="mixes joint-mode"):
        Pipeline([[PooledZScore(), ZScoreStandardizer()], RegularizedFDA()])


def test_parallel_fanout_matches_sequential(subjects):
    datasets, labels = subjects
    stages = [[PCAnalyzer(proportion=2), PCAnalyzer(proportion=3)], [RegularizedFDA(), LDAClassifier()]]
    sequential = Pipeline(stages).train(datasets[0], labels[0])
    parallel = Pipeline(stages, max_parallel=4).train(datasets[0], labels[0])
    for a, b in zip(sequential.test(datasets[0]), parallel.test(datasets[0])):
        np.testing.assert_array_equal(a, b)

    seq_multi = Pipeline([ZScoreStandardizer(), RegularizedFDA()]).train(datasets, labels)
    par_multi = Pipeline([ZScoreStandardizer(), RegularizedFDA()], max_parallel=3).train(datasets, labels)
    for a, b in zip(seq_multi.predict(datasets), par_multi.predict(datasets)):
        np.testing.assert_array_equal(a, b)
