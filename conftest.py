from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).parent / 'tests_py'


@pytest.fixture(autouse=True, scope='function')
def run_from_tests_dir(monkeypatch):
    """Template paths are relative by nature, so all tests run from
    within the tests directory. That way, fixture files can always be
    referenced as ``fixtures/<name>``, which is also exactly what the
    resulting template paths (and keys) look like.
    """
    monkeypatch.chdir(TESTS_DIR)
    yield


@pytest.fixture(autouse=True, scope='function')
def quiet_loader_logs(caplog):
    """The loader logs every dispatch decision at debug level. Capture
    at info, so that isolated failures (which are logged at info) are
    still available for assertions.
    """
    caplog.set_level('INFO', logger='temploader')
    yield
