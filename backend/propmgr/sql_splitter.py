"""Split expanded SQL into executable units, keeping stored routine bodies whole."""
import logging
import re
from typing import List, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TERMINATOR = ";"
DEFAULT_CUSTOM_TERMINATOR = "//"

# Internal token; SQL text never contains NUL characters
BOUNDARY_MARKER = "\x00__STATEMENT_BOUNDARY__\x00"

# The symbol may be followed by a `--` or `#` comment
DELIMITER_DIRECTIVE = re.compile(r"^[\t ]*DELIMITER[\t ]+(\S+)[\t ]*(?:(?:--|#).*)?$", re.IGNORECASE | re.MULTILINE)
DOUBLED_PUNCTUATION = re.compile(r"^([^\w\s;'\"`])\1$")

_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


def strip_delimiter_directives(text: str) -> Tuple[str, List[str]]:
    """
    Remove `DELIMITER` control lines.

    Each directive line is replaced by a boundary marker, since switching
    terminators always ends the statement in progress. Returns the new text
    and the custom terminators in order of first declaration; `//` is always
    included.
    """
    terminators = [DEFAULT_CUSTOM_TERMINATOR]

    def _replace(match):
        symbol = match.group(1)
        if symbol == DEFAULT_TERMINATOR:
            pass
        elif DOUBLED_PUNCTUATION.match(symbol):
            if symbol not in terminators:
                terminators.append(symbol)
        else:
            logger.warning(f"⚠ Unsupported DELIMITER '{symbol}' ignored; use a doubled symbol such as //")
        return BOUNDARY_MARKER

    return DELIMITER_DIRECTIVE.sub(_replace, text), terminators


def mark_boundaries(text: str, terminators: List[str]) -> str:
    """Replace custom terminators in recognised positions with the boundary marker."""
    for symbol in terminators:
        escaped = re.escape(symbol)
        # END // closes a routine; keep its body a complete statement
        text = re.sub(
            rf"\b(END)[\t ]*{escaped}[\t ]*(?:\r?\n|$)",
            lambda m: f"{m.group(1)};\n{BOUNDARY_MARKER}\n",
            text,
            flags=re.IGNORECASE,
        )
        text = re.sub(
            rf"^[\t ]*{escaped}[\t ]*$",
            BOUNDARY_MARKER,
            text,
            flags=re.MULTILINE,
        )
    return text


def is_comment_only(text: str) -> bool:
    """True when `text` holds nothing but SQL comments and whitespace."""
    for line in _BLOCK_COMMENT.sub("", text).splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith(("--", "#")):
            return False
    return True


def strip_leading_comments(statement: str) -> str:
    """Drop comment lines and blank lines in front of the first SQL token."""
    text = statement.lstrip()
    while True:
        if text.startswith(("--", "#")):
            _, _, text = text.partition("\n")
        elif text.startswith("/*") and "*/" in text:
            text = text.split("*/", 1)[1]
        else:
            return text
        text = text.lstrip()


def starts_with_keyword(statement: str, keyword: str) -> bool:
    """Check whether a statement's first token is `keyword` (case-insensitive)."""
    text = strip_leading_comments(statement)
    return re.match(rf"{re.escape(keyword)}\b", text, re.IGNORECASE) is not None


def split_statements(text: str) -> List[str]:
    """
    Split SQL text into trimmed, non-empty statements.

    Splitting happens only at boundary markers: a `DELIMITER` line, a line
    holding just a custom terminator, or a routine's closing `END` directly
    followed by one. Text between two boundaries is a single unit and may
    contain several `;`-terminated statements, which the multi-statement
    connection runs together.
    """
    cleaned, terminators = strip_delimiter_directives(text)
    marked = mark_boundaries(cleaned, terminators)

    statements = []
    for segment in marked.split(BOUNDARY_MARKER):
        segment = segment.strip()
        if not segment or is_comment_only(segment):
            continue
        statements.append(segment)
    return statements
