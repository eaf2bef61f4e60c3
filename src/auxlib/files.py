"""
Minor helpers for dealing with files.
"""

import os
import stat
import shutil
import logging as lg
from pathlib import PurePath


class FilesError(Exception):
    pass


def to_unix_path(path: PurePath | str) -> str:
    """
    Standardizes the path to be unix-like so paths compare the same
    way on Windows and Linux.
    """
    return str(path).replace("\\", "/")


def rewrite_file(path: PurePath | str, content: str) -> None:
    try:
        with open(path, "w") as f:
            f.write(content.strip())
    except OSError as err:
        raise FilesError(f"rewriting {str(path)!r}: {err}") from err


def dir_exists(path: PurePath | str) -> bool:
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return False
    except OSError as err:
        raise FilesError(f"stating path {str(path)!r}: {err}") from err
    return stat.S_ISDIR(st.st_mode)


def delete_file(path: PurePath | str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as err:
        raise FilesError(f"deleting {str(path)!r}: {err}") from err


def stat_file(path: PurePath | str) -> tuple[os.stat_result | None, bool]:
    """
    Returns the stat of the file and whether it was found.
    A missing file is not an error.
    """
    try:
        return os.stat(path), True
    except FileNotFoundError:
        return None, False
    except OSError as err:
        raise FilesError(f"stating {str(path)!r}: {err}") from err


def stat_file_error(err: BaseException | None, msg: str) -> FilesError:
    """
    Builds the error for either failure mode of stat_file, for callers that
    don't care about the difference between an error and a missing file:

        try:
            st, found = stat_file(path)
        except FilesError as err:
            raise stat_file_error(err, f"stating {path!r}") from err
        if not found:
            raise stat_file_error(None, f"stating {path!r}")
    """
    if err is None:
        return FilesError(f"{msg}: file not found")
    return FilesError(f"{msg}: {err}")


class CopyFileOptions:
    # Whether to create the owning directory of the destination
    dst_create_dir: bool
    dst_create_dir_mode: int
    # Flush the destination to disk before returning
    sync: bool

    def __init__(
        self,
        dst_create_dir: bool = False,
        dst_create_dir_mode: int = 0o755,
        sync: bool = False,
    ) -> None:
        self.dst_create_dir = dst_create_dir
        self.dst_create_dir_mode = dst_create_dir_mode
        self.sync = sync


DEFAULT_COPY_OPTIONS = CopyFileOptions()


def copy_file(src: PurePath | str, dst: PurePath | str) -> None:
    copy_file_advanced(src, dst, None)


def copy_file_advanced(
    src: PurePath | str, dst: PurePath | str, options: CopyFileOptions | None = None
) -> None:
    if options is None:
        options = DEFAULT_COPY_OPTIONS

    if options.dst_create_dir:
        parent = os.path.dirname(os.fspath(dst))
        if parent:
            try:
                os.makedirs(parent, mode=options.dst_create_dir_mode, exist_ok=True)
            except OSError as err:
                raise FilesError(f"mkdirall {parent!r}: {err}") from err

    try:
        src_file = open(src, "rb")
    except OSError as err:
        raise FilesError(f"opening {str(src)!r}: {err}") from err

    with src_file:
        try:
            # Creates or truncates the destination
            with open(dst, "wb") as dst_file:
                shutil.copyfileobj(src_file, dst_file)
                if options.sync:
                    dst_file.flush()
                    os.fsync(dst_file.fileno())
        except OSError as err:
            raise FilesError(
                f"copying data from {str(src)!r} to {str(dst)!r}: {err}") from err


def copy_dir_recursive(src: PurePath | str, dst: PurePath | str) -> None:
    """
    Copies every file under src into dst, keeping the relative structure.
    """
    src = os.path.normpath(src)
    dst = os.path.normpath(dst)

    files: list[str] = []
    try:
        for root, _, names in _walk(src):
            for name in names:
                rel = os.path.relpath(os.path.join(root, name), src)
                files.append(to_unix_path(rel))
    except OSError as err:
        raise FilesError(f"walking {src!r}: {err}") from err

    options = CopyFileOptions(dst_create_dir=True)
    for file in files:
        from_path = os.path.join(src, file)
        to_path = os.path.join(dst, file)
        lg.debug("Copying %s -> %s", from_path, to_path)
        copy_file_advanced(from_path, to_path, options)


def _walk(top: str):
    def on_error(err: OSError):
        raise err

    return os.walk(top, onerror=on_error)
