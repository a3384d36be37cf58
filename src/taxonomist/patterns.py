"""Rule template compilation into structured corpus queries.

Rule templates are plain text files written in the corpus engine's pattern
grammar. Each file holds one or more alternative rule bodies separated by
blank lines and refers to template variables as ``${name}``:

- ``${query}``: the caller's token sequence, one token constraint per token
- ``${chunk}``: a noun phrase (adjectives, nouns and an optional of-complement)

A rule may mark the relation's other argument with a named ``result``
capture, e.g. ``(?<result> ${chunk}) such as ${query}``.
"""

import logging
import re
from importlib import resources
from pathlib import Path

from .errors import ConfigurationError, QueryCompilationError
from .schemas import CompiledQuery, RelationKind

logger = logging.getLogger(__name__)


# Noun phrase: up to three adjectives, one or more nouns, optional of-complement
CHUNK_PATTERN = (
    "( [tag=/J.*/]{,3} [tag=/N.*/]+ (of [tag=DT]? [tag=/J.*/]{,3} [tag=/N.*/]+)? )"
)

RULE_FILES: dict[RelationKind, str] = {
    RelationKind.HYPERNYM: "hypernym-rules.txt",
    RelationKind.HYPONYM: "hyponym-rules.txt",
    RelationKind.COHYPONYM: "cohyponym-rules.txt",
}

_RULE_SEPARATOR = re.compile(r"\s*\n\s*\n\s*")
_VARIABLE = re.compile(r"\$\{(\w+)\}")
_BRACKETS = {")": "(", "]": "[", "}": "{"}


def escape_literal(token: str) -> str:
    """Escape a token for use inside a double-quoted pattern string."""
    escaped = token.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\t", "\\t").replace("\r", "\\r")
    return escaped


def render_tokens(tokens: list[str], lemmatize: bool) -> str:
    """
    Render tokens as a sequence of token constraints.

    Lemma mode matches each token against the lemma field; otherwise the
    lowercased token is matched against the normalized surface field.

    Args:
        tokens: Token sequence to render
        lemmatize: Whether the tokens are lemmas

    Returns:
        Pattern text, e.g. ``[norm="traffic"] [norm="jam"]``
    """
    if lemmatize:
        return " ".join(f'[lemma="{escape_literal(t)}"]' for t in tokens)
    return " ".join(f'[norm="{escape_literal(t.lower())}"]' for t in tokens)


def check_syntax(text: str) -> None:
    """
    Reject rule bodies the engine cannot possibly compile.

    Checks for unresolved template variables, unbalanced brackets and
    unterminated string or regex literals. Text inside literals is never
    read as a template variable.

    Raises:
        QueryCompilationError: If the body is malformed
    """
    unresolved: list[str] = []
    stack: list[str] = []
    i = 0
    while i < len(text):
        char = text[i]
        # string literals, and regex literals right after a field constraint
        if char == '"' or (char == "/" and i > 0 and text[i - 1] == "="):
            end = i + 1
            while end < len(text) and text[end] != char:
                end += 2 if text[end] == "\\" else 1
            if end >= len(text):
                raise QueryCompilationError(f"Unterminated literal at offset {i}", text)
            i = end + 1
            continue
        variable = _VARIABLE.match(text, i) if char == "$" else None
        if variable:
            unresolved.append(variable.group(1))
            i = variable.end()
            continue
        if char in "([{":
            stack.append(char)
        elif char in _BRACKETS:
            if not stack or stack.pop() != _BRACKETS[char]:
                raise QueryCompilationError(f"Unbalanced '{char}' at offset {i}", text)
        i += 1

    if unresolved:
        raise QueryCompilationError(
            f"Unresolved template variables: {', '.join(sorted(set(unresolved)))}", text
        )
    if stack:
        raise QueryCompilationError(f"Unclosed '{stack[-1]}'", text)


class PatternCompiler:
    """Compile relation rule templates against a token sequence."""

    def __init__(self, rules_dir: str | Path | None = None):
        """
        Initialize the compiler.

        Args:
            rules_dir: Directory with custom rule files. Packaged rules are used if None.
        """
        self.rules_dir = Path(rules_dir) if rules_dir is not None else None
        self._templates: dict[RelationKind, str] = {}

    def load_template(self, relation: RelationKind) -> str:
        """
        Load (and cache) the rule template for a relation.

        Raises:
            ConfigurationError: If the rule file does not exist
        """
        if relation in self._templates:
            return self._templates[relation]

        filename = RULE_FILES[relation]
        try:
            if self.rules_dir is not None:
                text = (self.rules_dir / filename).read_text(encoding="utf-8")
            else:
                text = resources.files("taxonomist").joinpath("rules", filename).read_text(
                    encoding="utf-8"
                )
        except (FileNotFoundError, OSError) as e:
            raise ConfigurationError(f"Rule template for {relation.value} not found: {e}") from e

        self._templates[relation] = text
        return text

    def compile(
        self,
        tokens: list[str],
        relation: RelationKind,
        lemmatize: bool = False,
    ) -> list[CompiledQuery]:
        """Compile the relation's rule template for the given tokens."""
        template = self.load_template(relation)
        return self.compile_rules(tokens, template, lemmatize, relation=relation)

    def compile_rules(
        self,
        tokens: list[str],
        rule_text: str,
        lemmatize: bool = False,
        relation: RelationKind | None = None,
    ) -> list[CompiledQuery]:
        """
        Compile arbitrary rule text for the given tokens.

        Args:
            tokens: Query token sequence substituted for ``${query}``
            rule_text: One or more rule bodies separated by blank lines
            lemmatize: Render tokens as lemma constraints
            relation: Relation the rules belong to, if any

        Returns:
            One CompiledQuery per non-empty rule body

        Raises:
            QueryCompilationError: If tokens are empty or a rule body is malformed
        """
        if not tokens:
            raise QueryCompilationError("Cannot compile rules for an empty token sequence")

        variables = {
            "query": render_tokens(tokens, lemmatize),
            "chunk": CHUNK_PATTERN,
        }

        def substitute(match: re.Match) -> str:
            return variables.get(match.group(1), match.group(0))

        bodies = [b.strip() for b in _RULE_SEPARATOR.split(rule_text.strip())]
        queries = []
        for body in bodies:
            if not body:
                continue
            text = _VARIABLE.sub(substitute, body)
            check_syntax(text)
            queries.append(CompiledQuery(relation=relation, rule_index=len(queries), text=text))

        if not queries:
            raise QueryCompilationError("Rule text contains no rules", rule_text)

        logger.debug(
            f"[COMPILE] {len(queries)} queries for {' '.join(tokens)!r} "
            f"({relation.value if relation else 'ad hoc'}, lemmatize={lemmatize})"
        )
        return queries
