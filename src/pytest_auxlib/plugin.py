import pytest

from auxlib.cache import FileCache, global_file_cache, set_global_file_cache
from auxlib.test_detection import mark_running_as_test


def pytest_addoption(parser):
    parser.addoption(
        "--keep-file-cache",
        action="store_true",
        default=False,
        help="keep file caching on for the session and in the file_cache fixture",
    )


def pytest_configure(config):
    mark_running_as_test()
    if config.getoption("--keep-file-cache"):
        set_global_file_cache(FileCache(bypass=False))


@pytest.fixture
def file_cache(request) -> FileCache:
    keep = request.config.getoption("--keep-file-cache")
    return FileCache(bypass=not keep)


@pytest.fixture
def runfile():
    from auxlib.test_support import runfile_path

    return runfile_path


def pytest_terminal_summary(terminalreporter, config):
    if config.getoption("--keep-file-cache"):
        cache = global_file_cache()
        terminalreporter.write_line(
            f"auxlib: {len(cache)} files in the global file cache (bypass: {cache.bypass})")
