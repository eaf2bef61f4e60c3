from .loaded_file import LoadedFile, LoadedFilePosition, LineScanError
from .cache import (FileCache, FileCacheError, PathResolutionError, StatError,
                    ReadError, KeyInUseError, global_file_cache, load_file_from_path)
from .test_detection import running_as_test, running_as_bazel_test
