"""DDL parser for CREATE TABLE statements.

Lexing is done by sqlglot's tokenizer, so string, identifier and comment
rules follow the chosen dialect. The statement structure on top of the
tokens is read with a small recursive-descent walk, which keeps clauses
sqlglot cannot parse (or parses differently per dialect) under our control.
"""
import logging
from typing import Dict, List, NamedTuple, Optional, Sequence

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import Tokenizer

from schemadiff.models.schema import Column, Constraint, ConstraintType, Schema, Table

logger = logging.getLogger(__name__)

WORD = "WORD"      # keyword or bare identifier
QUOTED = "QUOTED"  # "quoted" or `quoted` identifier
STRING = "STRING"  # string literal, quotes included
NUMBER = "NUMBER"
PUNCT = "PUNCT"    # operators and punctuation

# Words that end the type portion of a column definition
COLUMN_MODIFIERS = frozenset({
    "NOT", "NULL", "PRIMARY", "UNIQUE", "DEFAULT", "REFERENCES", "CHECK",
    "CONSTRAINT", "COLLATE", "AUTO_INCREMENT", "AUTOINCREMENT", "GENERATED",
    "IDENTITY", "COMMENT", "ON", "AS", "KEY",
})

_INDEX_KEYWORDS = frozenset({"INDEX", "FULLTEXT", "SPATIAL"})


class DDLTokenizer(Tokenizer):
    """Default lexing rules: ANSI strings, double-quoted or backtick identifiers."""

    IDENTIFIERS = ['"', "`"]


class Token(NamedTuple):
    """A lexical token with its position in the source text.

    ``text`` is the raw source slice; ``value`` is the unquoted name for
    quoted identifiers and equals ``text`` otherwise.
    """

    kind: str
    text: str
    start: int
    end: int
    value: str

    @property
    def is_identifier(self) -> bool:
        return self.kind in (WORD, QUOTED)

    def is_word(self, *words: str) -> bool:
        return self.kind == WORD and self.text.upper() in words

    def is_punct(self, char: str) -> bool:
        return self.kind == PUNCT and self.text == char


class _Cursor:
    """Forward-only position over the statement-level token stream."""

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        if index < len(self.tokens):
            return self.tokens[index]
        return None

    def advance(self) -> Optional[Token]:
        token = self.peek()
        if token is not None:
            self.pos += 1
        return token

    def at_create_table(self) -> bool:
        first, second = self.peek(), self.peek(1)
        return (
            first is not None and first.is_word("CREATE")
            and second is not None and second.is_word("TABLE")
        )

    def match_words(self, *words: str) -> bool:
        """Consume a run of keywords only if all of them are present."""
        for offset, word in enumerate(words):
            token = self.peek(offset)
            if token is None or not token.is_word(word):
                return False
        self.pos += len(words)
        return True

    def match_punct(self, char: str) -> bool:
        token = self.peek()
        if token is not None and token.is_punct(char):
            self.pos += 1
            return True
        return False


def parse_sql(sql: str, dialect: Optional[str] = None) -> Schema:
    """Parse CREATE TABLE statements into a Schema.

    Anything that is not a CREATE TABLE statement is skipped, as are clauses
    inside a table body that cannot be understood and statements that are
    not closed by ';'. A later definition of the same table replaces the
    earlier one. Never raises for malformed input.

    Args:
        sql: SQL text containing zero or more CREATE TABLE statements
        dialect: Optional sqlglot dialect name (e.g. 'mysql', 'postgres')
            whose string and identifier quoting rules apply

    Returns:
        Schema with one Table per parsed statement
    """
    tables: Dict[str, Table] = {}
    cursor = _Cursor(tokenize(sql, dialect))

    while not cursor.at_end():
        if not cursor.match_words("CREATE", "TABLE"):
            cursor.advance()
            continue

        table = _parse_create_table(cursor, sql)
        if table is None:
            continue
        if table.name in tables:
            logger.debug("Table %s defined more than once; keeping the last definition", table.name)
        tables[table.name] = table

    return Schema(tables=tables)


def tokenize(sql: str, dialect: Optional[str] = None) -> List[Token]:
    """Split SQL into tokens, dropping whitespace and comments.

    When the text as a whole cannot be lexed (an unterminated string, say),
    it is lexed again one CREATE statement at a time and the statements that
    still fail are left out.
    """
    try:
        return _convert(_lex(sql, dialect), sql, 0)
    except TokenError as e:
        logger.warning("SQL could not be tokenized as a whole (%s); reading statements one by one", e)

    tokens: List[Token] = []
    for offset, chunk in _statement_chunks(sql):
        try:
            tokens.extend(_convert(_lex(chunk, dialect), chunk, offset))
        except TokenError as e:
            logger.warning("Skipping SQL that cannot be tokenized at offset %d: %s", offset, e)
    return tokens


def _lex(sql: str, dialect: Optional[str]):
    if dialect is None:
        return DDLTokenizer().tokenize(sql)
    return sqlglot.tokenize(sql, read=dialect)


def _convert(raw_tokens, source: str, offset: int) -> List[Token]:
    """Map sqlglot tokens onto Token, splitting multi-word keywords like PRIMARY KEY."""
    tokens = []
    for raw in raw_tokens:
        text = source[raw.start:raw.end + 1]
        start = raw.start + offset
        type_name = raw.token_type.name

        if type_name == "STRING" or type_name.endswith("_STRING"):
            tokens.append(Token(STRING, text, start, start + len(text), text))
        elif type_name == "NUMBER":
            tokens.append(Token(NUMBER, text, start, start + len(text), text))
        elif type_name == "IDENTIFIER":
            tokens.append(Token(QUOTED, text, start, start + len(text), raw.text))
        elif text[:1].isalpha() or text[:1] == "_":
            tokens.extend(_split_words(text, start))
        else:
            tokens.append(Token(PUNCT, text, start, start + len(text), text))
    return tokens


def _split_words(text: str, start: int):
    index = 0
    while index < len(text):
        if text[index].isspace():
            index += 1
            continue
        end = index
        while end < len(text) and not text[end].isspace():
            end += 1
        word = text[index:end]
        yield Token(WORD, word, start + index, start + end, word)
        index = end


def _statement_chunks(sql: str):
    """Yield (offset, text) pieces of sql, each starting at a CREATE keyword."""
    upper = sql.upper()
    starts = [0]
    index = upper.find("CREATE", 1)
    while index != -1:
        after = sql[index + 6:index + 7]
        if not _is_word_char(sql[index - 1]) and not (after and _is_word_char(after)):
            starts.append(index)
        index = upper.find("CREATE", index + 1)

    for begin, end in zip(starts, starts[1:] + [len(sql)]):
        yield begin, sql[begin:end]


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def _parse_create_table(cursor: _Cursor, source: str) -> Optional[Table]:
    """Parse the remainder of a statement after CREATE TABLE."""
    cursor.match_words("IF", "NOT", "EXISTS")

    table_name = _parse_qualified_name(cursor)
    if table_name is None:
        logger.debug("Skipping CREATE TABLE without a table name")
        return None

    if not cursor.match_punct("("):
        logger.debug("Skipping CREATE TABLE %s without a column list", table_name)
        return None

    body = _collect_group(cursor)
    if body is None:
        logger.warning("CREATE TABLE %s has no closing parenthesis; skipping", table_name)
        return None

    if not _skip_to_statement_end(cursor):
        logger.warning("CREATE TABLE %s is not terminated by ';'; skipping", table_name)
        return None

    columns: Dict[str, Column] = {}
    constraints: List[Constraint] = []
    for clause in _split_top_level(body):
        _parse_clause(table_name, clause, columns, constraints, source)

    return Table(name=table_name, columns=columns, constraints=constraints)


def _parse_qualified_name(cursor: _Cursor) -> Optional[str]:
    """Read an optionally dotted identifier and return its last part, lower-cased."""
    token = cursor.peek()
    if token is None or not token.is_identifier:
        return None
    cursor.advance()
    name = token.value

    while True:
        dot, part = cursor.peek(), cursor.peek(1)
        if dot is None or not dot.is_punct(".") or part is None or not part.is_identifier:
            break
        cursor.pos += 2
        name = part.value

    return name.lower()


def _collect_group(cursor: _Cursor) -> Optional[List[Token]]:
    """Collect tokens up to the parenthesis closing an already consumed '('.

    Stops without consuming at the next CREATE TABLE, so an unclosed body
    does not swallow the statements after it.
    """
    depth = 1
    collected = []
    while not cursor.at_end():
        if cursor.at_create_table():
            return None
        token = cursor.advance()
        if token.is_punct("("):
            depth += 1
        elif token.is_punct(")"):
            depth -= 1
            if depth == 0:
                return collected
        collected.append(token)
    return None


def _skip_to_statement_end(cursor: _Cursor) -> bool:
    """Skip table options up to and including ';'.

    Returns False when the next CREATE TABLE or the end of input comes first;
    the CREATE TABLE is left for the caller.
    """
    depth = 0
    while not cursor.at_end():
        if depth == 0 and cursor.at_create_table():
            return False
        token = cursor.advance()
        if token.is_punct("("):
            depth += 1
        elif token.is_punct(")"):
            depth = max(depth - 1, 0)
        elif token.is_punct(";") and depth == 0:
            return True
    return False


def _split_top_level(tokens: Sequence[Token]) -> List[List[Token]]:
    """Split on commas that are not nested inside parentheses."""
    parts: List[List[Token]] = [[]]
    depth = 0
    for token in tokens:
        if token.is_punct("("):
            depth += 1
        elif token.is_punct(")"):
            depth = max(depth - 1, 0)
        elif token.is_punct(",") and depth == 0:
            parts.append([])
            continue
        parts[-1].append(token)
    return [part for part in parts if part]


def _matching_paren(tokens: Sequence[Token], open_index: int) -> int:
    """Index of the ')' closing tokens[open_index], or the last index if unbalanced."""
    depth = 0
    for index in range(open_index, len(tokens)):
        if tokens[index].is_punct("("):
            depth += 1
        elif tokens[index].is_punct(")"):
            depth -= 1
            if depth == 0:
                return index
    return len(tokens) - 1


def _find_punct(tokens: Sequence[Token], char: str, start: int = 0) -> int:
    for index in range(start, len(tokens)):
        if tokens[index].is_punct(char):
            return index
    return -1


def _find_word_pair(tokens: Sequence[Token], first: str, second: str) -> int:
    for index in range(len(tokens) - 1):
        if tokens[index].is_word(first) and tokens[index + 1].is_word(second):
            return index
    return -1


def _top_level(tokens: Sequence[Token]):
    """Yield (index, token) pairs for tokens at parenthesis depth 0."""
    depth = 0
    for index, token in enumerate(tokens):
        if token.is_punct("("):
            depth += 1
        elif token.is_punct(")"):
            depth = max(depth - 1, 0)
        elif depth == 0:
            yield index, token


def _column_list(tokens: Sequence[Token], open_index: int) -> List[str]:
    """Read the identifiers of a parenthesized list such as ``(a, "b" DESC)``."""
    close_index = _matching_paren(tokens, open_index)
    names = []
    for item in _split_top_level(tokens[open_index + 1:close_index]):
        if item[0].is_identifier:
            names.append(item[0].value.lower())
    return names


def _parse_clause(
    table_name: str,
    clause: List[Token],
    columns: Dict[str, Column],
    constraints: List[Constraint],
    source: str
) -> None:
    """Classify one comma-separated clause of a table body and record it."""
    first = clause[0]

    if first.is_word("CONSTRAINT"):
        # Only named foreign keys are recorded, under a synthesized name
        fk_index = _find_word_pair(clause, "FOREIGN", "KEY")
        if fk_index == -1:
            logger.debug("Ignoring constraint clause in %s: %s", table_name, _clause_text(clause, source))
            return
        _add_foreign_key(table_name, clause[fk_index:], constraints)
    elif first.is_word("PRIMARY") and len(clause) > 1 and clause[1].is_word("KEY"):
        _add_key_constraint(table_name, clause, ConstraintType.PRIMARY_KEY, f"pk_{table_name}", constraints)
    elif first.is_word("UNIQUE"):
        _add_key_constraint(table_name, clause, ConstraintType.UNIQUE, None, constraints)
    elif first.is_word("FOREIGN") and len(clause) > 1 and clause[1].is_word("KEY"):
        _add_foreign_key(table_name, clause, constraints)
    elif first.is_word("CHECK") or first.is_word(*_INDEX_KEYWORDS) or _is_key_index(clause):
        logger.debug("Ignoring %s clause in %s", first.text.upper(), table_name)
    else:
        column = _parse_column(clause, source)
        if column is None:
            logger.debug("Skipping unrecognized clause in %s: %s", table_name, _clause_text(clause, source))
            return
        if column.name in columns:
            logger.debug("Column %s.%s redefined; keeping the last definition", table_name, column.name)
        columns[column.name] = column


def _is_key_index(clause: List[Token]) -> bool:
    """Detect MySQL ``KEY [name] (col, ...)`` index declarations.

    ``key VARCHAR(10)`` stays a column: the parenthesized part has to be a
    plain identifier list.
    """
    if not clause[0].is_word("KEY") or len(clause) < 2:
        return False
    open_index = 1
    if not clause[1].is_punct("("):
        if len(clause) < 3 or not clause[1].is_identifier or not clause[2].is_punct("("):
            return False
        open_index = 2
    close_index = _matching_paren(clause, open_index)
    inner = clause[open_index + 1:close_index]
    return bool(inner) and all(t.is_identifier or t.is_punct(",") for t in inner)


def _add_key_constraint(
    table_name: str,
    clause: List[Token],
    constraint_type: ConstraintType,
    name: Optional[str],
    constraints: List[Constraint]
) -> None:
    """Handle PRIMARY KEY (...) and UNIQUE [KEY|INDEX] [name] (...)."""
    open_index = _find_punct(clause, "(")
    column_names = _column_list(clause, open_index) if open_index != -1 else []
    if not column_names:
        logger.debug("Skipping %s without columns in %s", constraint_type.value, table_name)
        return

    if name is None:
        name = f"uq_{table_name}_{','.join(column_names)}"

    constraints.append(Constraint(name=name, type=constraint_type, columns=column_names))


def _add_foreign_key(table_name: str, clause: List[Token], constraints: List[Constraint]) -> None:
    """Handle FOREIGN KEY (...) REFERENCES table (...)."""
    open_index = _find_punct(clause, "(")
    if open_index == -1:
        logger.debug("Skipping FOREIGN KEY without columns in %s", table_name)
        return
    column_names = _column_list(clause, open_index)
    close_index = _matching_paren(clause, open_index)

    rest = _Cursor(list(clause[close_index + 1:]))
    if not rest.match_words("REFERENCES"):
        logger.debug("Skipping FOREIGN KEY without REFERENCES in %s", table_name)
        return
    ref_table = _parse_qualified_name(rest)
    ref_open = rest.pos
    if ref_table is None or not rest.match_punct("("):
        logger.debug("Skipping FOREIGN KEY with incomplete target in %s", table_name)
        return
    ref_columns = _column_list(rest.tokens, ref_open)

    if not column_names or not ref_columns:
        logger.debug("Skipping FOREIGN KEY with empty column list in %s", table_name)
        return

    constraints.append(Constraint(
        name=f"fk_{table_name}_{','.join(column_names)}",
        type=ConstraintType.FOREIGN_KEY,
        columns=column_names,
        references=f"{ref_table}({', '.join(ref_columns)})"
    ))


def _parse_column(clause: List[Token], source: str) -> Optional[Column]:
    """Parse ``name type [modifiers...]``; None when there is no type."""
    if not clause[0].is_identifier:
        return None
    name = clause[0].value.lower()

    type_end = len(clause)
    for index, token in _top_level(clause):
        if index > 0 and token.kind == WORD and token.text.upper() in COLUMN_MODIFIERS:
            type_end = index
            break
    type_tokens = clause[1:type_end]
    if not type_tokens:
        return None

    modifiers = clause[type_end:]
    primary_key = _find_word_pair(modifiers, "PRIMARY", "KEY") != -1
    not_null = _find_word_pair(modifiers, "NOT", "NULL") != -1
    unique = any(token.is_word("UNIQUE") for token in modifiers)

    default_val = None
    for index, token in _top_level(clause):
        if index >= type_end and token.is_word("DEFAULT"):
            default_val = _default_text(clause, index, source)
            break

    return Column(
        name=name,
        type=_render_type(type_tokens),
        nullable=not (not_null or primary_key),
        default_val=default_val,
        primary_key=primary_key,
        unique=unique
    )


def _render_type(tokens: Sequence[Token]) -> str:
    """Render type tokens canonically, e.g. ``DECIMAL(10,2)`` or ``DOUBLE PRECISION``."""
    text = ""
    previous = None
    for token in tokens:
        glued = (
            previous is None
            or token.kind == PUNCT
            or (previous.kind == PUNCT and previous.text in "(,[.")
        )
        text += token.value if glued else f" {token.value}"
        previous = token
    return text.upper()


def _default_text(clause: List[Token], default_index: int, source: str) -> Optional[str]:
    """Return the source text after DEFAULT up to the next whitespace or comma.

    ``DEFAULT 'a b'`` yields ``'a`` and ``DEFAULT (1 + 2)`` yields ``(1``.
    """
    if default_index + 1 >= len(clause):
        return None
    start = clause[default_index + 1].start
    limit = clause[-1].end
    end = start
    while end < limit and not source[end].isspace() and source[end] != ",":
        end += 1
    return source[start:end] or None


def _clause_text(clause: List[Token], source: str) -> str:
    return source[clause[0].start:clause[-1].end]
