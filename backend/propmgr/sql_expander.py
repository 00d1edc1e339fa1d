"""Inline MySQL client `SOURCE` directives so a script tree can run through the driver."""
import logging
import re
from pathlib import Path
from typing import Optional, Set, Union

logger = logging.getLogger(__name__)

# `SOURCE file.sql;` and the client shorthand `\. file.sql`. An unquoted target
# must look like a path, so a column named `source` is never an include.
SOURCE_DIRECTIVE = re.compile(
    r"""^\s*(?:SOURCE|\\\.)\s+
        ( '[^']+' | "[^"]+" | [^\s,()'";]*[./\\][^\s,()'";]* )
        \s*;?\s*$""",
    re.IGNORECASE | re.VERBOSE,
)

# Only \n and \r\n end a line; other separators belong to the SQL text
LINE_BREAK = re.compile(r"\r?\n")

# Raised while reading a script: missing, unreadable or not UTF-8
FILE_ERRORS = (OSError, UnicodeDecodeError)


def read_sql_file(path: Union[str, Path]) -> str:
    """Read an SQL file, dropping a leading BOM some editors add."""
    with open(path, "r", encoding="utf-8-sig") as f:
        return f.read()


def parse_source_directive(line: str) -> Optional[str]:
    """Return the include target of a directive line, or None."""
    match = SOURCE_DIRECTIVE.match(line)
    if not match:
        return None
    target = match.group(1).strip()
    if len(target) >= 2 and target[0] == target[-1] and target[0] in ("'", '"'):
        target = target[1:-1]
    return target or None


def resolve_include(target: str, base_dir: Path) -> Path:
    """Resolve an include path against the directory of the including file."""
    include_path = Path(target)
    if not include_path.is_absolute():
        include_path = base_dir / include_path
    return include_path.resolve()


def expand_source_directives(
    file_path: Union[str, Path],
    visited: Optional[Set[Path]] = None
) -> str:
    """
    Return the content of `file_path` with every SOURCE directive replaced by
    the expanded content of the referenced file.

    Included files are wrapped in `-- Begin SOURCE` / `-- End SOURCE`
    comments. A file already seen during this expansion contributes nothing,
    so circular and repeated includes terminate.

    Raises:
        FileNotFoundError: If `file_path` itself does not exist
        UnicodeDecodeError: If `file_path` itself is not valid UTF-8
    """
    path = Path(file_path).resolve()
    if visited is None:
        visited = set()
    if path in visited:
        logger.debug(f"Already expanded, skipping: {path}")
        return ""

    raw = read_sql_file(path)
    visited.add(path)
    out = []

    lines = LINE_BREAK.split(raw)
    if lines[-1] == "":
        lines.pop()

    for line in lines:
        target = parse_source_directive(line)
        if target is None:
            out.append(line + "\n")
            continue

        include_path = resolve_include(target, path.parent)
        try:
            content = expand_source_directives(include_path, visited)
        except OSError as e:
            logger.warning(f"⚠ Skipping missing SOURCE {include_path}: {e.strerror or e}")
            out.append(f"\n-- Skipping missing SOURCE {include_path}\n")
            continue
        except UnicodeDecodeError as e:
            logger.warning(f"⚠ Skipping undecodable SOURCE {include_path}: {e.reason} at byte {e.start}")
            out.append(f"\n-- Skipping undecodable SOURCE {include_path}\n")
            continue

        out.append(f"\n-- Begin SOURCE {include_path}\n")
        out.append(content)
        out.append(f"\n-- End SOURCE {include_path}\n")

    return "".join(out)
