import os
import threading
import logging as lg
from .loaded_file import LoadedFile
from .test_detection import running_as_test


class FileCacheError(Exception):
    key: str
    path: str | None

    def __init__(self, msg: str, key: str, path: str | None = None) -> None:
        super().__init__(msg)
        self.key = key
        self.path = path


class PathResolutionError(FileCacheError):
    pass


class StatError(FileCacheError):
    pass


class ReadError(FileCacheError):
    pass


class KeyInUseError(FileCacheError):
    pass


class FileCache:
    """
    In-memory view of loaded files, at most one record per key.

    When bypass is on the table is neither consulted nor populated, so
    every load reads its source again. By default bypass is on whenever
    the process runs as a test.
    """

    files: dict[str, LoadedFile]
    bypass: bool

    def __init__(self, bypass: bool | None = None) -> None:
        if bypass is None:
            bypass = running_as_test()
        self.files = {}
        self.bypass = bypass
        self._lock = threading.Lock()
        lg.debug("File cache created (bypass: %s)", bypass)

    def __len__(self) -> int:
        with self._lock:
            return len(self.files)

    def __contains__(self, key: str) -> bool:
        return self.query_key(key) is not None

    def query_key(self, key: str) -> LoadedFile | None:
        if self.bypass:
            return None
        with self._lock:
            return self.files.get(key)

    def load_from_path(
        self, path: str | os.PathLike, key: str | None = None, overwrite: bool = False
    ) -> LoadedFile:
        """
        Loads a file from disk. Without an explicit key, the key is the
        absolute path of the file. An already loaded key is returned as is
        unless overwrite is set.
        """
        try:
            abs_path = os.path.abspath(os.fspath(path))
        except (OSError, ValueError, TypeError) as err:
            raise PathResolutionError(
                f"abs {path!r}: {err}", key or str(path), str(path)) from err
        if key is None:
            key = abs_path

        if not overwrite:
            existing = self.query_key(key)
            if existing is not None:
                lg.debug("File cache hit: %s", key)
                return existing

        try:
            stat = os.stat(abs_path)
        except OSError as err:
            raise StatError(f"stat {abs_path!r}: {err}", key, abs_path) from err
        try:
            with open(abs_path, "rb") as f:
                data = f.read()
        except OSError as err:
            raise ReadError(f"reading {abs_path!r}: {err}", key, abs_path) from err

        lg.debug("Loaded %s (%d bytes) as %s", abs_path, len(data), key)
        file = LoadedFile(key, data, from_file=True, stat=stat)
        return self._insert(file, overwrite, keep_existing=True)

    def new_from_data(self, key: str, data: bytes, overwrite: bool = False) -> LoadedFile:
        """
        Creates a record from an in-memory buffer, normally a test fixture.
        The key must not be in use already unless overwrite is set.
        """
        file = LoadedFile(key, data)
        return self._insert(file, overwrite, keep_existing=False)

    def _insert(self, file: LoadedFile, overwrite: bool, keep_existing: bool) -> LoadedFile:
        if self.bypass:
            return file
        key = file.key
        with self._lock:
            existing = self.files.get(key)
            if existing is not None and not overwrite:
                # Another load of the same key got here first
                if keep_existing:
                    return existing
                raise KeyInUseError(f"key {key!r} is already in use", key)
            if existing is not None:
                lg.debug("Overwriting file cache entry: %s", key)
            self.files[key] = file
        return file


_global_cache: FileCache | None = None
_global_lock = threading.Lock()


def global_file_cache() -> FileCache:
    global _global_cache

    if _global_cache is None:
        with _global_lock:
            if _global_cache is None:
                _global_cache = FileCache()
    return _global_cache


def set_global_file_cache(cache: FileCache) -> None:
    """
    Replaces the process-wide cache, e.g. to keep caching on under tests.
    """
    global _global_cache

    with _global_lock:
        _global_cache = cache


def load_file_from_path(path: str | os.PathLike) -> LoadedFile:
    return global_file_cache().load_from_path(path)
