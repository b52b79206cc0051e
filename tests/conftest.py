import gc

import numpy
import pytest

from alignkit.core.alignment import make_aligned


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: marks tests as slow")


@pytest.fixture
def dna_aln():
    """3 sequences x 5 sites, site 2 is all gaps"""
    return make_aligned(
        {"s1": "AC-GT", "s2": "AC-TT", "s3": "GC-GA"},
        alphabet="dna",
    )


@pytest.fixture
def protein_aln():
    return make_aligned(
        {"p1": "MSTAVLE", "p2": "MSNAILD", "p3": "MTTAVLE", "p4": "MS-AMLE"},
        alphabet="protein",
    )


@pytest.fixture
def rng():
    return numpy.random.default_rng(42)


@pytest.fixture(scope="session", autouse=True)
def _try_cleaning_up_on_autouse_fixture_teardown():
    yield
    for _ in range(10):
        gc.collect()


def pytest_sessionfinish(session, exitstatus):
    for _ in range(10):
        gc.collect()
