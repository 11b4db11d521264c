from __future__ import annotations

"""File-system capabilities for ACTION-category work.

Every failure is caught here and reported as text starting with ``Error:``;
a missing path is additionally reported with "does not exist". The transition
engine keys off those two markers, so they must stay in the messages.

Relative paths resolve against ``root`` (the configured workspace).
"""

import fnmatch
import logging
import os
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple

from ..schemas.domain import ActionName
from .base import CapabilityContext, CapabilityResult
from .definitions import ListFilesArgs, ReadFileArgs, SearchFilesArgs, WriteToFileArgs

logger = logging.getLogger(__name__)

DEFAULT_IGNORED_DIRS: FrozenSet[str] = frozenset({"node_modules", "dist", ".git", "__pycache__", ".venv"})


def _resolve(root: Path, raw: str) -> Path:
    path = Path(raw).expanduser()
    return path if path.is_absolute() else root / path


def _error(message: str) -> CapabilityResult:
    logger.info(message)
    return CapabilityResult(ok=False, output=message)


@dataclass(frozen=True)
class ReadFileCapability:
    """
    Read a text file, truncating long content.

    Output starts with ``File: <path> (<lines> lines, <chars> characters)``.
    """

    name: str = ActionName.read_file.value
    root: Path = Path(".")
    max_chars: int = 5000

    async def execute(self, ctx: CapabilityContext, *, args: ReadFileArgs) -> CapabilityResult:
        filepath = args.filepath
        logger.info(f"read_file: {filepath}")
        try:
            content = _resolve(self.root, filepath).read_text(encoding="utf-8")
        except FileNotFoundError:
            return _error(f'Error: File "{filepath}" does not exist.')
        except PermissionError:
            return _error(f'Error: Permission denied reading "{filepath}".')
        except (OSError, UnicodeDecodeError) as e:
            return _error(f'Error: could not read "{filepath}": {e}')

        size = len(content)
        lines = len(content.split("\n"))
        if size > self.max_chars:
            body = (
                f"{content[: self.max_chars]}\n\n"
                f"... [File truncated - showing first {self.max_chars} characters of {size} total]"
            )
        else:
            body = content
        return CapabilityResult(ok=True, output=f"File: {filepath} ({lines} lines, {size} characters)\n{body}")


def _matches_pattern(name: str, pattern: str) -> bool:
    if "*" in pattern or "?" in pattern:
        return fnmatch.fnmatch(name, pattern)
    if pattern.startswith("."):
        return not name.endswith("/") and name.endswith(pattern)
    return pattern in name


@dataclass(frozen=True)
class ListFilesCapability:
    """
    List one directory level. Directories are suffixed with ``/`` and listed first.

    ``pattern`` filters entries: a glob when it contains ``*`` or ``?``, a
    suffix when it starts with ``.``, otherwise a substring.
    """

    name: str = ActionName.list_files.value
    root: Path = Path(".")

    async def execute(self, ctx: CapabilityContext, *, args: ListFilesArgs) -> CapabilityResult:
        directory, pattern = args.directory, args.pattern
        logger.info(f"list_files: {directory} (pattern: {pattern or 'all files'})")
        try:
            entries = [e.name + "/" if e.is_dir() else e.name for e in _resolve(self.root, directory).iterdir()]
        except FileNotFoundError:
            return _error(f'Error: Directory "{directory}" does not exist.')
        except NotADirectoryError:
            return _error(f'Error: "{directory}" is not a directory.')
        except PermissionError:
            return _error(f'Error: Permission denied accessing "{directory}".')
        except OSError as e:
            return _error(f'Error: could not list "{directory}": {e}')

        if pattern:
            entries = [e for e in entries if _matches_pattern(e, pattern)]
        entries.sort(key=lambda e: (not e.endswith("/"), e.lower(), e))

        if not entries:
            suffix = f' matching pattern "{pattern}"' if pattern else ""
            return CapabilityResult(ok=True, output=f'No files found in "{directory}"{suffix}.')

        listing = "\n".join(f"  {e}" for e in entries)
        return CapabilityResult(ok=True, output=f"Files in {directory} ({len(entries)} items):\n{listing}")


@dataclass(frozen=True)
class SearchFilesCapability:
    """
    Case-insensitive line search across the workspace.

    Unreadable or binary files are skipped. At most ``max_matches`` matches are
    shown, grouped by file.
    """

    name: str = ActionName.search_files.value
    root: Path = Path(".")
    max_matches: int = 50
    ignored_dirs: FrozenSet[str] = field(default=DEFAULT_IGNORED_DIRS)

    def _candidates(self, file_types: Optional[List[str]]) -> List[Path]:
        suffixes = {"." + t.lstrip(".").lower() for t in file_types or []}
        out: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(self.root):
            # pruned in place so os.walk never descends into ignored trees
            dirnames[:] = [d for d in dirnames if d not in self.ignored_dirs]
            for filename in filenames:
                path = Path(dirpath) / filename
                if suffixes and path.suffix.lower() not in suffixes:
                    continue
                if path.is_file():
                    out.append(path)
        return sorted(out)

    async def execute(self, ctx: CapabilityContext, *, args: SearchFilesArgs) -> CapabilityResult:
        query, file_types = args.query, args.file_types
        logger.info(f'search_files: "{query}" in {", ".join(file_types or []) or "all"} files')
        needle = query.lower()
        try:
            candidates = self._candidates(file_types)
        except OSError as e:
            return _error(f"Error: searching files failed: {e}")

        matches: List[Tuple[str, int, str]] = []
        for path in candidates:
            try:
                text = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue
            shown = path.relative_to(self.root).as_posix()
            for lineno, line in enumerate(text.split("\n"), start=1):
                if needle in line.lower():
                    matches.append((shown, lineno, line.strip()))

        if not matches:
            scope = f" in {', '.join(file_types)} files" if file_types else ""
            return CapabilityResult(ok=True, output=f'No matches found for "{query}"{scope}.')

        grouped: Dict[str, List[Tuple[int, str]]] = {}
        for shown, lineno, line in matches[: self.max_matches]:
            grouped.setdefault(shown, []).append((lineno, line))

        header = f'Search results for "{query}": Found {len(matches)} matches in {len(grouped)} files'
        if len(matches) > self.max_matches:
            header += f" (showing first {self.max_matches})"
        parts = [header + ":\n"]
        for shown, file_matches in grouped.items():
            parts.append(f"\n{shown}:\n")
            parts.extend(f"  Line {lineno}: {line}\n" for lineno, line in file_matches)
        return CapabilityResult(ok=True, output="".join(parts))


@dataclass(frozen=True)
class WriteToFileCapability:
    """
    Create, overwrite or append to a file.

    Parent directories are created. Overwriting an existing file first copies
    it to ``<name>.backup.<epoch ms>``.
    """

    name: str = ActionName.write_to_file.value
    root: Path = Path(".")

    async def execute(self, ctx: CapabilityContext, *, args: WriteToFileArgs) -> CapabilityResult:
        filepath, content, mode = args.filepath, args.content, args.mode
        preview = content[:100] + ("..." if len(content) > 100 else "")
        logger.info(f"write_to_file: {filepath} ({mode}) preview={preview!r}")
        path = _resolve(self.root, filepath)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            existed = path.exists()

            if mode == "append":
                with path.open("a", encoding="utf-8") as fh:
                    fh.write(content)
                return CapabilityResult(ok=True, output=f"Successfully appended {len(content)} characters to {filepath}")

            if existed:
                backup = path.with_name(f"{path.name}.backup.{int(time.time() * 1000)}")
                shutil.copyfile(path, backup)
                logger.info(f"write_to_file: created backup {backup}")

            path.write_text(content, encoding="utf-8")
        except PermissionError:
            return _error(f'Error: Permission denied writing to "{filepath}".')
        except OSError as e:
            return _error(f'Error: could not write to "{filepath}": {e}')

        verb = "overwrote" if existed else "created"
        return CapabilityResult(ok=True, output=f"Successfully {verb} {filepath} with {len(content)} characters")
