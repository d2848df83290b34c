import pytest

from pysirs.runtime_defaults import resolve_scoring_defaults


def test_small_cohort_single_pass():
    defaults = resolve_scoring_defaults(500, env={})
    assert defaults.chunk_size is None
    assert defaults.workers == 1
    assert defaults.profile == 'small'
    assert 'chunk_size=disabled' in defaults.summary()


def test_large_cohort_profile():
    defaults = resolve_scoring_defaults(250000, env={})
    assert defaults.profile == 'large'
    assert defaults.chunk_size == 50000
    assert defaults.workers == 4


def test_env_overrides():
    env = {'PYSIRS_CHUNK_SIZE': '100', 'PYSIRS_WORKERS': '3'}
    defaults = resolve_scoring_defaults(500, env=env)
    assert defaults.chunk_size == 100
    assert defaults.workers == 3
    assert defaults.source == {'chunk': 'env(PYSIRS_CHUNK_SIZE)', 'workers': 'env(PYSIRS_WORKERS)'}


def test_invalid_env_ignored():
    defaults = resolve_scoring_defaults(500, env={'PYSIRS_WORKERS': 'many', 'PYSIRS_CHUNK_SIZE': '-5'})
    assert defaults.workers == 1
    assert defaults.chunk_size is None


def test_arguments_win():
    env = {'PYSIRS_CHUNK_SIZE': '100'}
    defaults = resolve_scoring_defaults(500, chunk_size=0, workers=2, env=env)
    assert defaults.chunk_size is None
    assert defaults.workers == 2
    assert defaults.source['chunk'] == 'argument'


def test_negative_chunk_size_rejected():
    with pytest.raises(ValueError, match="chunk_size"):
        resolve_scoring_defaults(500, chunk_size=-1, env={})


def test_zero_workers_rejected():
    with pytest.raises(ValueError, match="workers"):
        resolve_scoring_defaults(500, workers=0, env={})
