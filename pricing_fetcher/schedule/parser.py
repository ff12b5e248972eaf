"""
Pricing Fetcher - Schedule Expression Language

Textual form of a schedule, used for configuration and log output.
No eval(), no exec(). Hand-written tokenizer + recursive descent parser.

Grammar:
    expression  := term (("or" | "|") term)*
    term        := factor (("and" | "&") factor)*
    factor      := ("not" | "~") factor
                 | "(" expression ")"
                 | call
    call        := "always" | "never"
                 | LEAF "(" [value ("," value)*] ")"
                 | "times" "(" expression "," NUMBER ")"
    LEAF        := "weeks" | "days" | "hours" | "minutes" | "months"
    value       := NUMBER | day name (days() only: sun..sat, sunday..saturday)

Examples:
    days(wed) and hours(6, 12)
    days(thu) and hours(5, 6, 7) and minutes(30)
    times(hours(9) and minutes(0), 3)
    not weeks(1)
"""
import re
from typing import List, Optional, Tuple

from .algebra import (
    Always,
    DaysOfWeek,
    Intersection,
    LEAF_TYPES,
    Negate,
    Never,
    Schedule,
    Times,
    Union,
    _FieldMatcher,
)
from .errors import ScheduleParseError, ScheduleValueError
from .models import DayOfWeek


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------

_TOKEN_PATTERNS = [
    ("NUMBER",    r'\d+'),
    ("LPAREN",    r'\('),
    ("RPAREN",    r'\)'),
    ("COMMA",     r','),
    ("OP_OR",     r'\|'),
    ("OP_AND",    r'&'),
    ("OP_NOT",    r'~'),
    ("IDENT",     r'[A-Za-z_][A-Za-z0-9_]*'),
    ("WS",        r'\s+'),
]

_TOKEN_RE = re.compile("|".join(f"(?P<{name}>{pat})" for name, pat in _TOKEN_PATTERNS))

# (type, value, position)
Token = Tuple[str, str, int]

_LEAVES = {cls.keyword: cls for cls in LEAF_TYPES}


def _tokenize(text: str) -> List[Token]:
    """Tokenize expression string. Returns [(type, value, position), ...]."""
    tokens: List[Token] = []
    pos = 0
    for m in _TOKEN_RE.finditer(text):
        if m.start() != pos:
            raise ScheduleParseError(f"Unexpected character {text[pos]!r}", pos)
        pos = m.end()
        if m.lastgroup == "WS":
            continue
        tokens.append((m.lastgroup, m.group(), m.start()))
    if pos != len(text):
        raise ScheduleParseError(f"Unexpected character {text[pos]!r}", pos)
    return tokens


def parse_schedule(text: str) -> Schedule:
    """
    Parse a schedule expression.

    Raises:
        ScheduleParseError: If the expression is malformed or a value is
            out of range.
    """
    if text is None or not text.strip():
        raise ScheduleParseError("Empty schedule expression")

    parser = _Parser(_tokenize(text), len(text))
    schedule = parser.parse_expression()

    tok = parser._peek()
    if tok is not None:
        raise ScheduleParseError(f"Unexpected token {tok[1]!r}", tok[2])
    return schedule


# ---------------------------------------------------------------------------
# Parser (recursive descent)
# ---------------------------------------------------------------------------

class _Parser:
    """Recursive descent parser over the token list produced by _tokenize()."""

    def __init__(self, tokens: List[Token], length: int):
        self.tokens = tokens
        self.pos = 0
        self._length = length

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _advance(self) -> Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _expect(self, kind: str) -> Token:
        tok = self._peek()
        if tok is None:
            raise ScheduleParseError(f"Expected {kind} but got end of expression", self._length)
        if tok[0] != kind:
            raise ScheduleParseError(f"Expected {kind} but got {tok[1]!r}", tok[2])
        return self._advance()

    def _match(self, op_kind: str, keyword: str) -> bool:
        """Consume the operator token or its keyword spelling if present."""
        tok = self._peek()
        if tok is None:
            return False
        if tok[0] == op_kind or (tok[0] == "IDENT" and tok[1].lower() == keyword):
            self._advance()
            return True
        return False

    # ------------------------------------------------------------------
    # Grammar rules
    # ------------------------------------------------------------------

    def parse_expression(self) -> Schedule:
        """expression := term ("or" term)*"""
        left = self.parse_term()
        while self._match("OP_OR", "or"):
            left = Union(left, self.parse_term())
        return left

    def parse_term(self) -> Schedule:
        """term := factor ("and" factor)*"""
        left = self.parse_factor()
        while self._match("OP_AND", "and"):
            left = Intersection(left, self.parse_factor())
        return left

    def parse_factor(self) -> Schedule:
        """factor := "not" factor | "(" expression ")" | call"""
        if self._match("OP_NOT", "not"):
            return Negate(self.parse_factor())

        tok = self._peek()
        if tok is None:
            raise ScheduleParseError("Expected schedule but got end of expression", self._length)

        if tok[0] == "LPAREN":
            self._advance()
            inner = self.parse_expression()
            self._expect("RPAREN")
            return inner

        return self.parse_call()

    def parse_call(self) -> Schedule:
        """call := "always" | "never" | LEAF "(" values ")" | "times" "(" expression "," NUMBER ")" """
        name_tok = self._expect("IDENT")
        name = name_tok[1].lower()

        if name == "always":
            return Always()
        if name == "never":
            return Never()

        if name == "times":
            self._expect("LPAREN")
            inner = self.parse_expression()
            self._expect("COMMA")
            count_tok = self._expect("NUMBER")
            self._expect("RPAREN")
            return Times(inner, int(count_tok[1]))

        leaf_cls = _LEAVES.get(name)
        if leaf_cls is None:
            raise ScheduleParseError(f"Unknown schedule {name_tok[1]!r}", name_tok[2])

        self._expect("LPAREN")
        values = []
        tok = self._peek()
        if tok is not None and tok[0] != "RPAREN":
            values.append(self.parse_value(leaf_cls))
            while self._peek() is not None and self._peek()[0] == "COMMA":
                self._advance()
                values.append(self.parse_value(leaf_cls))
        self._expect("RPAREN")

        try:
            return leaf_cls(frozenset(values))
        except ScheduleValueError as e:
            raise ScheduleParseError(str(e), name_tok[2]) from e

    def parse_value(self, leaf_cls) -> int:
        """value := NUMBER | day name"""
        tok = self._peek()
        if tok is None:
            raise ScheduleParseError("Expected value but got end of expression", self._length)

        if tok[0] == "NUMBER":
            self._advance()
            return int(tok[1])

        if tok[0] == "IDENT" and leaf_cls is DaysOfWeek:
            self._advance()
            try:
                return DayOfWeek.from_name(tok[1])
            except ValueError as e:
                raise ScheduleParseError(str(e), tok[2]) from e

        raise ScheduleParseError(f"Expected value but got {tok[1]!r}", tok[2])


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

# Binding strength, loosest first
_PREC_OR = 1
_PREC_AND = 2
_PREC_NOT = 3
_PREC_ATOM = 4


# (text, binding strength)
Rendered = Tuple[str, int]


def format_schedule(schedule: Schedule) -> str:
    """
    Render a schedule in the expression language.

    parse_schedule() reads the text back into an equal tree. The parser
    folds "a or b or c" to the left, so a right operand built from the
    same operator is parenthesised.
    """
    text, _ = _format(schedule)
    return text


def _wrap(rendered: Rendered, min_prec: int) -> str:
    text, prec = rendered
    return f"({text})" if prec < min_prec else text


def _format_leaf(schedule: Schedule) -> Optional[Rendered]:
    if isinstance(schedule, DaysOfWeek):
        names = ", ".join(DayOfWeek(v).short_name for v in sorted(schedule.values))
        return f"days({names})", _PREC_ATOM
    if isinstance(schedule, _FieldMatcher):
        values = ", ".join(str(v) for v in sorted(schedule.values))
        return f"{schedule.keyword}({values})", _PREC_ATOM
    if isinstance(schedule, Always):
        return "always", _PREC_ATOM
    if isinstance(schedule, Never):
        return "never", _PREC_ATOM
    return None


def _format(schedule: Schedule) -> Rendered:
    """Post-order walk with an explicit stack, same traversal as evaluate()."""
    rendered: List[Rendered] = []
    stack: List[Tuple[Schedule, bool]] = [(schedule, False)]

    while stack:
        node, children_done = stack.pop()

        leaf = _format_leaf(node)
        if leaf is not None:
            rendered.append(leaf)
        elif not children_done:
            if isinstance(node, (Union, Intersection)):
                stack.append((node, True))
                stack.append((node.right, False))
                stack.append((node.left, False))
            elif isinstance(node, (Negate, Times)):
                stack.append((node, True))
                stack.append((node.inner, False))
            else:
                raise TypeError(f"Unknown schedule node: {type(node).__name__}")
        elif isinstance(node, Times):
            inner, _ = rendered.pop()
            rendered.append((f"times({inner}, {node.n})", _PREC_ATOM))
        elif isinstance(node, Negate):
            rendered.append((f"not {_wrap(rendered.pop(), _PREC_NOT)}", _PREC_NOT))
        else:
            prec, op = (_PREC_AND, "and") if isinstance(node, Intersection) else (_PREC_OR, "or")
            right, left = rendered.pop(), rendered.pop()
            rendered.append((f"{_wrap(left, prec)} {op} {_wrap(right, prec + 1)}", prec))

    return rendered.pop()
