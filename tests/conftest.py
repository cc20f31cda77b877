import pytest

from measurement_system import Measurement


@pytest.fixture
def variable1() -> Measurement:
    return Measurement(3.0, 0.4, "MeV")


@pytest.fixture
def variable2() -> Measurement:
    return Measurement(5.0, 0.6, "MeV")


@pytest.fixture
def variable3() -> Measurement:
    """Same value and units as variable1."""
    return Measurement(3.0, 0.4, "MeV")


@pytest.fixture
def throw_tester() -> Measurement:
    """Units that match nothing else in the suite."""
    return Measurement(0.1, 0.01, "a")
