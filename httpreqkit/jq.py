"""A small jq expression engine for querying JSON-like data."""

from __future__ import annotations

import copy
import json
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, NamedTuple

__all__ = [
    "JQError",
    "Query",
    "compile_query",
    "run_query",
    "parse_string",
    "parse_float",
    "parse_bool",
    "parse_map_interface",
    "parse_map_strings",
    "is_jq_query",
]


class JQError(Exception):
    """Raised when a query cannot be parsed or evaluated."""


class _Token(NamedTuple):
    kind: str
    value: Any


_LEXEME = re.compile(
    r"\s+"
    r"|(?P<field>\.[A-Za-z_][A-Za-z0-9_]*)"
    r'|(?P<str>"(?:[^"\\]|\\.)*")'
    r"|(?P<num>\d+(?:\.\d*)?(?:[eE][+-]?\d+)?)"
    r"|(?P<var>\$[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<ident>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<op>//|==|!=|<=|>=|[|,<>+\-*/%()\[\]{}:;?.])"
)
_KEYWORDS = frozenset(
    {"and", "or", "if", "then", "elif", "else", "end", "as", "def", "reduce",
     "foreach", "try", "catch", "label", "import", "include"}
)


def _tokenize(text: str) -> list[_Token]:
    tokens: list[_Token] = []
    pos = 0
    while pos < len(text):
        m = _LEXEME.match(text, pos)
        if not m:
            raise JQError(f"unexpected character {text[pos]!r} at {pos}")
        pos = m.end()
        kind = m.lastgroup
        if kind is None:
            continue
        raw = m.group(kind)
        if kind == "field" or kind == "var":
            value: Any = raw[1:]
        elif kind == "str":
            try:
                value = json.loads(raw)
            except json.JSONDecodeError:
                raise JQError(f"invalid string literal {raw}") from None
        elif kind == "num":
            value = int(raw) if raw.isdigit() else float(raw)
        else:
            value = raw
        tokens.append(_Token(kind, value))
    return tokens


class _Parser:
    def __init__(self, text: str) -> None:
        self.tokens = _tokenize(text)
        self.pos = 0

    def peek(self, offset: int = 0) -> _Token | None:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def is_op(self, value: str, offset: int = 0) -> bool:
        return self.peek(offset) == _Token("op", value)

    def is_word(self, value: str) -> bool:
        return self.peek() == _Token("ident", value)

    def advance(self) -> _Token:
        tok = self.peek()
        if tok is None:
            raise JQError("unexpected end of query")
        self.pos += 1
        return tok

    def accept_op(self, value: str) -> bool:
        if self.is_op(value):
            self.pos += 1
            return True
        return False

    def accept_word(self, value: str) -> bool:
        if self.is_word(value):
            self.pos += 1
            return True
        return False

    def expect(self, value: str, word: bool = False) -> None:
        if not (self.accept_word(value) if word else self.accept_op(value)):
            tok = self.peek()
            got = "end of query" if tok is None else repr(tok.value)
            raise JQError(f"expected {value!r} but got {got}")

    def parse(self) -> tuple:
        node = self.pipe()
        if self.peek() is not None:
            raise JQError(f"unexpected token {self.peek().value!r}")
        return node

    def pipe(self) -> tuple:
        node = self.comma()
        while self.accept_op("|"):
            node = ("pipe", node, self.comma())
        return node

    def comma(self) -> tuple:
        node = self.alt()
        while self.accept_op(","):
            node = ("comma", node, self.alt())
        return node

    def alt(self) -> tuple:
        node = self.or_expr()
        if self.accept_op("//"):
            node = ("alt", node, self.alt())
        return node

    def or_expr(self) -> tuple:
        node = self.and_expr()
        while self.accept_word("or"):
            node = ("or", node, self.and_expr())
        return node

    def and_expr(self) -> tuple:
        node = self.comparison()
        while self.accept_word("and"):
            node = ("and", node, self.comparison())
        return node

    def comparison(self) -> tuple:
        node = self.binary(("+", "-"))
        for op in _COMPARATORS:
            if self.accept_op(op):
                return ("cmp", op, node, self.binary(("+", "-")))
        return node

    def binary(self, ops: tuple[str, ...]) -> tuple:
        operand = (lambda: self.binary(("*", "/", "%"))) if "+" in ops else self.unary
        node = operand()
        while (tok := self.peek()) is not None and tok.kind == "op" and tok.value in ops:
            self.pos += 1
            node = ("arith", tok.value, node, operand())
        return node

    def unary(self) -> tuple:
        if self.accept_op("-"):
            return ("neg", self.unary())
        return self.postfix()

    def postfix(self) -> tuple:
        node = self.primary()
        while True:
            tok = self.peek()
            if tok is not None and tok.kind == "field":
                self.pos += 1
                node = ("index", node, ("lit", tok.value))
            elif self.is_op(".") and self.peek(1) is not None and self.peek(1).kind == "str":
                self.pos += 1
                node = ("index", node, ("lit", self.advance().value))
            elif self.is_op(".") and self.is_op("[", 1):
                self.pos += 1
            elif self.accept_op("["):
                if self.accept_op("]"):
                    node = ("iter", node)
                else:
                    node = ("index", node, self.pipe())
                    self.expect("]")
            elif self.accept_op("?"):
                node = ("try", node)
            else:
                return node

    def primary(self) -> tuple:
        tok = self.advance()
        if tok.kind == "field":
            return ("index", ("identity",), ("lit", tok.value))
        if tok.kind in ("num", "str"):
            return ("lit", tok.value)
        if tok.kind == "var":
            return ("var", tok.value)
        if tok.kind == "ident":
            return self.word(tok.value)
        if tok.value == ".":
            nxt = self.peek()
            if nxt is not None and nxt.kind == "str":
                self.pos += 1
                return ("index", ("identity",), ("lit", nxt.value))
            return ("identity",)
        if tok.value == "(":
            node = self.pipe()
            self.expect(")")
            return node
        if tok.value == "[":
            if self.accept_op("]"):
                return ("lit", [])
            node = self.pipe()
            self.expect("]")
            return ("array", node)
        if tok.value == "{":
            return self.obj()
        raise JQError(f"unexpected token {tok.value!r}")

    def word(self, name: str) -> tuple:
        literals = {"true": True, "false": False, "null": None}
        if name in literals:
            return ("lit", literals[name])
        if name == "if":
            return self.conditional()
        if name in _KEYWORDS:
            raise JQError(f"unexpected keyword {name!r}")
        args: list[tuple] = []
        if self.accept_op("("):
            args.append(self.pipe())
            while self.accept_op(";"):
                args.append(self.pipe())
            self.expect(")")
        return ("call", name, tuple(args))

    def conditional(self) -> tuple:
        cond = self.pipe()
        self.expect("then", word=True)
        body = self.pipe()
        if self.accept_word("elif"):
            return ("if", cond, body, self.conditional())
        other = self.pipe() if self.accept_word("else") else None
        self.expect("end", word=True)
        return ("if", cond, body, other)

    def obj(self) -> tuple:
        entries: list[tuple[tuple, tuple]] = []
        if self.accept_op("}"):
            return ("object", ())
        while True:
            tok = self.advance()
            if tok.kind in ("ident", "str"):
                key = ("lit", tok.value)
                shorthand = ("index", ("identity",), key)
            elif tok.kind == "var":
                key, shorthand = ("lit", tok.value), ("var", tok.value)
            elif tok == _Token("op", "("):
                key, shorthand = self.pipe(), None
                self.expect(")")
            else:
                raise JQError(f"invalid object key {tok.value!r}")
            if self.accept_op(":"):
                value = self.alt()
                while self.accept_op("|"):
                    value = ("pipe", value, self.alt())
            elif shorthand is not None:
                value = shorthand
            else:
                raise JQError("expected ':' after computed object key")
            entries.append((key, value))
            if self.accept_op("}"):
                return ("object", tuple(entries))
            self.expect(",")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if _is_number(value):
        return "number"
    names = {str: "string", list: "array", dict: "object"}
    return names.get(type(value), type(value).__name__)


def _describe(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError):
        return repr(value)


def _truthy(value: Any) -> bool:
    return value is not None and value is not False


def _rank(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        return 2 if value else 1
    if _is_number(value):
        return 3
    for rank, kind in ((4, str), (5, list), (6, dict)):
        if isinstance(value, kind):
            return rank
    raise JQError(f"unsupported value {value!r}")


def _compare(a: Any, b: Any) -> int:
    ra, rb = _rank(a), _rank(b)
    if ra != rb:
        return (ra > rb) - (ra < rb)
    if ra == 5:
        for x, y in zip(a, b):
            result = _compare(x, y)
            if result:
                return result
        return (len(a) > len(b)) - (len(a) < len(b))
    if ra == 6:
        keys_a, keys_b = sorted(a), sorted(b)
        if keys_a != keys_b:
            return _compare(keys_a, keys_b)
        return next((r for r in (_compare(a[k], b[k]) for k in keys_a) if r), 0)
    if ra < 3:
        return 0
    return (a > b) - (a < b)


_COMPARATORS = {
    "==": lambda c: c == 0,
    "!=": lambda c: c != 0,
    "<=": lambda c: c <= 0,
    ">=": lambda c: c >= 0,
    "<": lambda c: c < 0,
    ">": lambda c: c > 0,
}


def _arith(op: str, left: Any, right: Any) -> Any:
    numbers = _is_number(left) and _is_number(right)
    if op == "+":
        if left is None:
            return right
        if right is None:
            return left
        if numbers or type(left) is type(right) in (str, list):
            return left + right
        if isinstance(left, dict) and isinstance(right, dict):
            return {**left, **right}
    elif op == "-":
        if numbers:
            return left - right
        if isinstance(left, list) and isinstance(right, list):
            return [x for x in left if all(_compare(x, y) for y in right)]
    elif op == "*" and numbers:
        return left * right
    elif op in ("/", "%") and numbers:
        if (right if op == "/" else int(right)) == 0:
            raise JQError(f"{_describe(left)} and {_describe(right)} cannot be divided because the divisor is zero")
        if op == "%":
            return int(math.fmod(int(left), int(right)))
        result = left / right
        if isinstance(left, int) and isinstance(right, int) and result.is_integer():
            return int(result)
        return result
    raise JQError(
        f"{_type_name(left)} ({_describe(left)}) and {_type_name(right)} "
        f"({_describe(right)}) cannot be combined with {op}"
    )


def _index(base: Any, key: Any) -> Any:
    if base is None and (key is None or isinstance(key, str) or _is_number(key)):
        return None
    if isinstance(base, dict) and isinstance(key, str):
        return base.get(key)
    if isinstance(base, list) and _is_number(key):
        position = math.floor(key)
        if position < 0:
            position += len(base)
        return base[position] if 0 <= position < len(base) else None
    raise JQError(f"cannot index {_type_name(base)} with {_describe(key)}")


def _iterate(value: Any) -> list:
    if isinstance(value, dict):
        return list(value.values())
    if isinstance(value, list):
        return list(value)
    raise JQError(f"cannot iterate over {_type_name(value)}")


def _length(value: Any) -> Any:
    if value is None:
        return 0
    if _is_number(value):
        return abs(value)
    if isinstance(value, (str, list, dict)):
        return len(value)
    raise JQError(f"{_type_name(value)} ({_describe(value)}) has no length")


def _to_number(value: Any) -> Any:
    if _is_number(value):
        return value
    if isinstance(value, str):
        text = value.strip()
        for convert in (int, float):
            try:
                number = convert(text)
            except ValueError:
                continue
            if math.isfinite(number):
                return number
    raise JQError(f"cannot parse {_describe(value)} as a number")


def _call(name: str, args: tuple, value: Any) -> Iterator[Any]:
    signature = (name, len(args))
    if signature == ("empty", 0):
        return
    if signature == ("not", 0):
        yield not _truthy(value)
    elif signature == ("length", 0):
        yield _length(value)
    elif signature == ("keys", 0):
        if isinstance(value, dict):
            yield sorted(value)
        elif isinstance(value, list):
            yield list(range(len(value)))
        else:
            raise JQError(f"{_type_name(value)} ({_describe(value)}) has no keys")
    elif signature == ("type", 0):
        yield _type_name(value)
    elif signature == ("tostring", 0):
        yield value if isinstance(value, str) else _describe(value)
    elif signature == ("tonumber", 0):
        yield _to_number(value)
    elif signature == ("select", 1):
        for condition in _eval(args[0], value):
            if _truthy(condition):
                yield value
    elif signature == ("map", 1):
        yield [result for item in _iterate(value) for result in _eval(args[0], item)]
    else:
        raise JQError(f"function not defined: {name}/{len(args)}")


def _build_objects(entries: tuple, value: Any) -> list[dict]:
    results: list[dict] = [{}]
    for key_node, value_node in entries:
        extended: list[dict] = []
        for partial in results:
            for key in _eval(key_node, value):
                if not isinstance(key, str):
                    raise JQError(f"object keys must be strings, not {_type_name(key)}")
                extended.extend({**partial, key: item} for item in _eval(value_node, value))
        results = extended
    return results


def _eval(node: tuple, value: Any) -> Iterator[Any]:
    kind = node[0]
    if kind == "identity":
        yield value
    elif kind == "lit":
        yield copy.deepcopy(node[1])
    elif kind == "index":
        for key in list(_eval(node[2], value)):
            for base in _eval(node[1], value):
                yield _index(base, key)
    elif kind == "iter":
        for base in _eval(node[1], value):
            yield from _iterate(base)
    elif kind == "try":
        try:
            yield from _eval(node[1], value)
        except JQError:
            return
    elif kind == "pipe":
        for item in _eval(node[1], value):
            yield from _eval(node[2], item)
    elif kind == "comma":
        yield from _eval(node[1], value)
        yield from _eval(node[2], value)
    elif kind == "alt":
        try:
            found = [item for item in _eval(node[1], value) if _truthy(item)]
        except JQError:
            found = []
        yield from found or _eval(node[2], value)
    elif kind in ("and", "or"):
        for left in _eval(node[1], value):
            if kind == "or" and _truthy(left):
                yield True
            elif kind == "and" and not _truthy(left):
                yield False
            else:
                yield from (_truthy(right) for right in _eval(node[2], value))
    elif kind in ("cmp", "arith"):
        for right in list(_eval(node[3], value)):
            for left in _eval(node[2], value):
                if kind == "cmp":
                    yield _COMPARATORS[node[1]](_compare(left, right))
                else:
                    yield _arith(node[1], left, right)
    elif kind == "neg":
        for item in _eval(node[1], value):
            if not _is_number(item):
                raise JQError(f"{_type_name(item)} ({_describe(item)}) cannot be negated")
            yield -item
    elif kind == "array":
        yield list(_eval(node[1], value))
    elif kind == "object":
        yield from _build_objects(node[1], value)
    elif kind == "if":
        for condition in _eval(node[1], value):
            if _truthy(condition):
                yield from _eval(node[2], value)
            elif node[3] is None:
                yield value
            else:
                yield from _eval(node[3], value)
    elif kind == "call":
        yield from _call(node[1], node[2], value)
    elif kind == "var":
        raise JQError(f"variable not defined: ${node[1]}")
    else:
        raise JQError(f"unknown expression {kind!r}")


@dataclass(frozen=True)
class Query:
    """A parsed jq expression."""

    text: str
    _ast: tuple = field(repr=False, compare=False)

    def run(self, obj: Any) -> Iterator[Any]:
        """Yield every result of the query applied to ``obj``."""
        try:
            yield from _eval(self._ast, obj)
        except RecursionError:
            raise JQError("query nested too deeply") from None


def compile_query(query: str) -> Query:
    """Parse ``query`` into a :class:`Query`, raising :class:`JQError` on syntax errors."""
    try:
        return Query(query, _Parser(query).parse())
    except RecursionError:
        raise JQError("query nested too deeply") from None


def run_query(query: str, obj: Any) -> Any:
    """Return the first result of ``query`` applied to ``obj``."""
    results = compile_query(query).run(obj)
    try:
        return next(results)
    except StopIteration:
        raise JQError("query should return at least one value, failed on: null") from None
    except JQError as exc:
        raise JQError(f"failed to parse given mapping - {query} jq error: {exc}") from None


def parse_string(query: str, obj: Any) -> str:
    """Run ``query`` and require a string result."""
    result = run_query(query, obj)
    if not isinstance(result, str):
        raise JQError(f"failed to parse string: {_describe(result)}")
    return result


def parse_float(query: str, obj: Any) -> float:
    """Run ``query`` and require a numeric result."""
    result = run_query(query, obj)
    if not _is_number(result):
        raise JQError(f"failed to parse float: {_describe(result)}")
    return float(result)


def parse_bool(query: str, obj: Any) -> bool:
    """Run ``query`` and require a boolean result."""
    result = run_query(query, obj)
    if not isinstance(result, bool):
        raise JQError(f"failed to parse string: {_describe(result)}")
    return result


def parse_map_interface(query: str, obj: Any) -> dict[str, Any]:
    """Run ``query`` and require an object result, returned as a new dict."""
    result = run_query(query, obj)
    if not isinstance(result, dict):
        raise JQError(f"failed to parse map: {_describe(result)}")
    return dict(result)


def parse_map_strings(key_to_queries: dict[str, list[str]], obj: Any) -> dict[str, list[str]]:
    """Evaluate each query; failing queries are kept verbatim, non-string results raise."""
    result: dict[str, list[str]] = {}
    for key, queries in key_to_queries.items():
        values: list[str] = []
        for query in queries:
            try:
                outcome = run_query(query, obj)
            except JQError:
                values.append(query)
                continue
            if not isinstance(outcome, str):
                raise JQError(f"failed to parse result on jq query: {_describe(outcome)}")
            values.append(outcome)
        result[key] = values
    return result


def is_jq_query(query: str) -> bool:
    """Return True if ``query`` parses as a jq expression."""
    try:
        compile_query(query)
    except JQError:
        return False
    return True