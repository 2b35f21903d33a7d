# Part of Lab-Stats-Dashboard
# Copyright (C) 2025 Mesh Research
#
# Lab-Stats-Dashboard is free software; you can redistribute it and/or modify
# it under the terms of the MIT License; see LICENSE file for more details.

"""Atomic file writing."""

import os
import tempfile
from typing import IO, Any


class AtomicFileWriter:
    """Writes to a temporary file that replaces the target file when closed.

    The temporary file is created in the target's directory so the final
    rename doesn't cross filesystems. If writing fails or the writer is
    discarded, the target is left untouched.

    Use as a context manager:

    .. code-block:: python

        with AtomicFileWriter("out/data.tsv") as w:
            w.printf("%s\t%d\n", "2020-06-01", 3)
    """

    def __init__(self, path: str | os.PathLike, mode: str = "w", **kwargs: Any):
        """Create the temporary file.

        Args:
            path: Final path of the file.
            mode: "w" for text or "wb" for binary output.
            **kwargs: Passed to the underlying file, e.g. newline="".
        """
        self.path = os.fspath(path)
        directory, name = os.path.split(os.path.abspath(self.path))
        if "b" not in mode:
            kwargs.setdefault("encoding", "utf-8")
        self._file: IO = tempfile.NamedTemporaryFile(
            mode=mode, dir=directory, prefix=f"{name}.", delete=False, **kwargs
        )
        self._closed = False

    @property
    def file(self) -> IO:
        """The underlying temporary file object."""
        return self._file

    def write(self, data: Any) -> int:
        """Write str or bytes data."""
        return self._file.write(data)

    def printf(self, fmt: str, *args: Any) -> int:
        """Write printf-style formatted text."""
        return self._file.write(fmt % args if args else fmt)

    def close(self) -> None:
        """Close the temporary file and move it to the target path."""
        if self._closed:
            return
        self._closed = True
        try:
            self._file.close()
            os.replace(self._file.name, self.path)
        except OSError:
            self._remove_temp()
            raise

    def discard(self) -> None:
        """Close and delete the temporary file without touching the target."""
        if self._closed:
            return
        self._closed = True
        self._file.close()
        self._remove_temp()

    def _remove_temp(self) -> None:
        try:
            os.unlink(self._file.name)
        except FileNotFoundError:
            pass

    def __enter__(self) -> "AtomicFileWriter":
        """Return the writer."""
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        """Commit on success or discard on error."""
        if exc_type is None:
            self.close()
        else:
            self.discard()
