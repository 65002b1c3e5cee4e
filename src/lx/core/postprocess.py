import logging
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

PostProcessor = Callable[[Path, str], None]

_FORMATTERS: dict[str, list[list[str]]] = {
    "go": [["goimports", "-w"]],
    "python": [["ruff", "format"]],
    "javascript": [["prettier", "--write"]],
    "typescript": [["prettier", "--write"]],
    "tsx": [["prettier", "--write"]],
    "rust": [["rustfmt"]],
    "c": [["clang-format", "-i"]],
}


def run_formatters(file_path: Path, language: str) -> None:
    """Run the language's formatters on a rewritten file.

    Missing tools and failing runs are logged and otherwise ignored; the file
    has already been written and stays as is.
    """
    for command in _FORMATTERS.get(language, []):
        executable = command[0]
        if shutil.which(executable) is None:
            logger.debug("%s not found in PATH, skipping", executable)
            continue
        try:
            result = subprocess.run(
                [*command, str(file_path)],
                check=False,
                capture_output=True,
                text=True,
            )
        except OSError as exc:
            logger.warning("Could not run %s on %s: %s", executable, file_path, exc)
            continue
        if result.returncode != 0:
            logger.warning("%s exited with %d on %s: %s", executable, result.returncode, file_path, result.stderr.strip())


def no_post_processing(file_path: Path, language: str) -> None:
    logger.debug("Formatting disabled for %s (%s)", file_path, language)
