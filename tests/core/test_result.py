"""
Tests for the Result[P] envelope.

Validates:
    - Generic type parameter works with arbitrary payload types
    - Frozen immutability
    - Default factories (warnings, provenance)
    - has_warning() method
    - Provenance metadata contains expected version keys
"""

from dataclasses import FrozenInstanceError, dataclass

import pytest

import groupstats
from groupstats.core.result import Result, _default_provenance


@dataclass(frozen=True)
class FakeParams:
    """Minimal payload for testing."""
    value: float


class TestConstruction:

    def test_fields(self):
        r = Result(
            params=FakeParams(1.5),
            info={'control': 'Control'},
            timing={'total_seconds': 0.01},
            backend_name='cpu_stats',
        )
        assert r.params.value == 1.5
        assert r.info['control'] == 'Control'
        assert r.timing == {'total_seconds': 0.01}
        assert r.backend_name == 'cpu_stats'

    def test_tuple_payload(self):
        r = Result(params=(1, 2, 3), info={}, timing=None, backend_name='x')
        assert r.params == (1, 2, 3)
        assert r.timing is None

    def test_default_warnings_empty(self):
        r = Result(params=None, info={}, timing=None, backend_name='x')
        assert r.warnings == ()


class TestImmutability:

    def test_frozen(self):
        r = Result(params=FakeParams(1.0), info={}, timing=None, backend_name='x')
        with pytest.raises(FrozenInstanceError):
            r.backend_name = 'y'


class TestWarnings:

    def test_has_warning_substring(self):
        r = Result(
            params=None, info={}, timing=None, backend_name='x',
            warnings=("height/Test_A: only 1 value(s), statistics undefined",),
        )
        assert r.has_warning("only 1 value")
        assert not r.has_warning("constant")


class TestProvenance:

    def test_version_keys(self):
        prov = _default_provenance()
        assert prov['groupstats_version'] == groupstats.__version__
        assert 'numpy_version' in prov
        assert 'scipy_version' in prov

    def test_attached_by_default(self):
        r = Result(params=None, info={}, timing=None, backend_name='x')
        assert r.provenance['groupstats_version'] == groupstats.__version__
