from __future__ import annotations

# pdfsections/flatten.py

import logging
import os
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import List, Optional, Protocol

from pdfsections.errors import FlattenError

logger = logging.getLogger(__name__)


class Flattener(Protocol):
    def is_available(self) -> bool: ...

    def flatten(self, data: bytes) -> bytes: ...


# ---------------------------------------------------------------------------
# Ghostscript discovery
# ---------------------------------------------------------------------------

if os.name == "nt":
    GS_COMMANDS = ["gswin64c", "gswin32c", "gs"]
    GS_PATHS = [
        r"C:\Program Files\gs\gs10.02.1\bin\gswin64c.exe",
        r"C:\Program Files\gs\gs10.01.1\bin\gswin64c.exe",
        r"C:\Program Files\gs\gs10.00.0\bin\gswin64c.exe",
        r"C:\Program Files (x86)\gs\gs10.02.1\bin\gswin32c.exe",
        r"C:\Program Files (x86)\gs\gs10.01.1\bin\gswin32c.exe",
        r"C:\Program Files (x86)\gs\gs10.00.0\bin\gswin32c.exe",
    ]
else:
    GS_COMMANDS = ["gs"]
    GS_PATHS = [
        "/usr/local/bin/gs",
        "/opt/homebrew/bin/gs",
        "/usr/bin/gs",
        "/opt/local/bin/gs",
        "/usr/local/ghostscript/bin/gs",
    ]


def _responds(executable: str) -> bool:
    try:
        result = subprocess.run(
            [executable, "--version"],
            capture_output=True,
            text=True,
            check=False,
            timeout=10,
        )
        return result.returncode == 0
    except (OSError, subprocess.SubprocessError):
        return False


def find_ghostscript() -> Optional[str]:
    """Return the path of a working Ghostscript executable, or None."""
    for command in GS_COMMANDS:
        found = shutil.which(command)
        if found and _responds(found):
            return found

    for candidate in GS_PATHS:
        if Path(candidate).is_file():
            return candidate

    return None


def flatten_command(executable: str, src: Path, dst: Path) -> List[str]:
    return [
        executable,
        "-dSAFER",
        "-dBATCH",
        "-dNOPAUSE",
        "-dNOCACHE",
        "-sDEVICE=pdfwrite",
        "-dPreserveAnnots=false",
        f"-sOutputFile={dst}",
        str(src),
    ]


def _remove_quietly(path: Path) -> None:
    try:
        if path.is_dir():
            path.rmdir()
        elif path.exists():
            path.unlink()
    except OSError as e:
        logger.warning("Could not delete temporary file %s: %s", path, e)


class GhostscriptFlattener:
    """
    Flattens annotations into page content by round-tripping the PDF
    through Ghostscript's pdfwrite device.
    """

    def __init__(self, executable: Optional[str] = None, timeout: float = 120):
        self._executable = executable
        self._searched = executable is not None
        self.timeout = timeout

    @property
    def executable(self) -> Optional[str]:
        if not self._searched:
            self._executable = find_ghostscript()
            self._searched = True
            if self._executable:
                logger.info("Using Ghostscript at %s", self._executable)
            else:
                logger.warning("Ghostscript not found; flattening disabled")
        return self._executable

    def is_available(self) -> bool:
        return self.executable is not None

    def flatten(self, data: bytes) -> bytes:
        executable = self.executable
        if executable is None:
            raise FlattenError("Ghostscript not found")

        try:
            temp_dir = Path(tempfile.mkdtemp(prefix="pdf-flatten-"))
        except OSError as e:
            raise FlattenError(f"Could not create temporary directory: {e}")

        src = temp_dir / "input.pdf"
        dst = temp_dir / "flattened.pdf"
        try:
            try:
                src.write_bytes(data)
            except OSError as e:
                raise FlattenError(f"Could not write temporary file: {e}")

            cmd = flatten_command(executable, src, dst)
            logger.debug("Running %s", " ".join(cmd))
            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired:
                raise FlattenError(f"Ghostscript timed out after {self.timeout}s")
            except OSError as e:
                raise FlattenError(f"Could not start Ghostscript: {e}")

            if result.returncode != 0:
                raise FlattenError(
                    f"Ghostscript failed (exit code {result.returncode}): "
                    f"{result.stderr.strip()}"
                )

            try:
                return dst.read_bytes()
            except OSError as e:
                raise FlattenError(f"Could not read flattened PDF: {e}")
        finally:
            _remove_quietly(src)
            _remove_quietly(dst)
            _remove_quietly(temp_dir)
