"""
Cadence interaction parser.

Extracts the parameter list of a transaction or script so that raw
argument values can be labelled with their identifier and type.
"""

import re
from dataclasses import dataclass, field

from flowdex.utils.exceptions import ScriptParseError

INTERACTION_TRANSACTION = "transaction"
INTERACTION_SCRIPT = "script"

_TRANSACTION_DECLARATION = re.compile(r"\btransaction\s*[({]")
_SCRIPT_DECLARATION = re.compile(r"\bfun\s+main\s*\(")
# A string literal matches before any comment starting inside it
_COMMENT_OR_STRING = re.compile(
    r'"(?:\\.|[^"\\\n])*"|//[^\n]*|/\*.*?\*/', re.DOTALL
)


def strip_comments(source: str) -> str:
    """Remove comments and blank out string literal contents."""
    return _COMMENT_OR_STRING.sub(
        lambda match: '""' if match.group().startswith('"') else "",
        source,
    )


@dataclass
class InteractionParameter:
    """Declared parameter of an interaction."""

    identifier: str
    type: str


@dataclass
class ParsedInteraction:
    """Parse result; either kind + parameters or an error message."""

    kind: str | None = None
    parameters: list[InteractionParameter] = field(default_factory=list)
    error: str | None = None

    @property
    def is_ok(self) -> bool:
        """Check if parsing succeeded."""
        return self.error is None


def _balanced_body(source: str, open_index: int) -> str:
    """Return text between the parenthesis at open_index and its match."""
    depth = 0
    for index in range(open_index, len(source)):
        char = source[index]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return source[open_index + 1:index]
    raise ScriptParseError("Unbalanced parentheses in parameter list")


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested in brackets."""
    parts, depth, current = [], 0, []
    for char in text:
        if char in "([{<":
            depth += 1
        elif char in ")]}>":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_parameters(parameter_list: str) -> list[InteractionParameter]:
    """
    Parse a Cadence parameter list ("a: Int, _ b: String").

    Raises:
        ScriptParseError: If a parameter has no type annotation
    """
    parameters = []
    for declaration in _split_top_level(parameter_list):
        name_part, separator, type_part = declaration.partition(":")
        if not separator or not type_part.strip():
            raise ScriptParseError(f"Parameter without type: {declaration!r}")
        # "label name" - the last word is the identifier
        identifier = name_part.split()[-1] if name_part.split() else ""
        if not identifier:
            raise ScriptParseError(f"Parameter without name: {declaration!r}")
        parameters.append(
            InteractionParameter(identifier=identifier, type=type_part.strip())
        )
    return parameters


class CadenceScriptParser:
    """Parses interaction declarations out of Cadence source code."""

    async def parse(self, source: str) -> ParsedInteraction:
        """
        Parse a transaction or script.

        Never raises; failures are reported in ParsedInteraction.error.

        Args:
            source: Cadence source

        Returns:
            ParsedInteraction
        """
        return self.parse_source(source)

    def parse_source(self, source: str) -> ParsedInteraction:
        """Synchronous variant of parse()."""
        code = strip_comments(source or "")

        for kind, pattern in (
            (INTERACTION_TRANSACTION, _TRANSACTION_DECLARATION),
            (INTERACTION_SCRIPT, _SCRIPT_DECLARATION),
        ):
            match = pattern.search(code)
            if match is None:
                continue
            if code[match.end() - 1] == "{":
                # transaction { ... } declares no parameters
                return ParsedInteraction(kind=kind)
            try:
                body = _balanced_body(code, match.end() - 1)
                return ParsedInteraction(
                    kind=kind, parameters=parse_parameters(body)
                )
            except ScriptParseError as e:
                return ParsedInteraction(kind=kind, error=str(e))

        return ParsedInteraction(
            error="No transaction or script declaration found"
        )
