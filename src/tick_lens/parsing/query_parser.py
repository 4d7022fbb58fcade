"""Parser for the tick lens query language."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Union

import ply.yacc as yacc

from tick_lens.parsing.query_lexer import QueryLexer


@dataclass
class ScanQuery:
    """A single bounded scan: ``scan L to U [limit N] [exact]``."""

    tick_lower: int
    tick_upper: int
    limit: int | None = None
    exact: bool = False


@dataclass
class CollectQuery:
    """A paginated scan of the whole range: ``collect L to U [limit N] [exact]``."""

    tick_lower: int
    tick_upper: int
    limit: int | None = None
    exact: bool = False


@dataclass
class SetTickQuery:
    """A SET TICK query."""

    tick: int
    liquidity_gross: int
    liquidity_net: int
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0


@dataclass
class ClearTickQuery:
    """A CLEAR TICK query."""

    tick: int


@dataclass
class GetTickQuery:
    """A GET TICK query."""

    tick: int


@dataclass
class ShowBitmapQuery:
    """A SHOW BITMAP query, optionally restricted to a tick range."""

    tick_lower: int | None = None
    tick_upper: int | None = None


@dataclass
class ShowInfoQuery:
    """A SHOW INFO query."""

    pass


Query = Union[
    ScanQuery,
    CollectQuery,
    SetTickQuery,
    ClearTickQuery,
    GetTickQuery,
    ShowBitmapQuery,
    ShowInfoQuery,
]


class QueryParser:
    """Parser for tick lens queries."""

    tokens = QueryLexer.tokens

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._pending_error: SyntaxError | None = None

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : query SEMICOLON
                     | query"""
        p[0] = p[1]

    def p_query_scan(self, p: yacc.YaccProduction) -> None:
        """query : SCAN tick_range limit_opt exact_opt"""
        lower, upper = p[2]
        p[0] = ScanQuery(tick_lower=lower, tick_upper=upper, limit=p[3], exact=p[4])

    def p_query_collect(self, p: yacc.YaccProduction) -> None:
        """query : COLLECT tick_range limit_opt exact_opt"""
        lower, upper = p[2]
        p[0] = CollectQuery(tick_lower=lower, tick_upper=upper, limit=p[3], exact=p[4])

    def p_query_set_tick(self, p: yacc.YaccProduction) -> None:
        """query : SET TICK INTEGER GROSS INTEGER NET INTEGER fee_list"""
        fees = p[8]
        p[0] = SetTickQuery(
            tick=p[3],
            liquidity_gross=p[5],
            liquidity_net=p[7],
            fee_growth_outside_0_x128=fees.get("fee0", 0),
            fee_growth_outside_1_x128=fees.get("fee1", 0),
        )

    def p_query_clear_tick(self, p: yacc.YaccProduction) -> None:
        """query : CLEAR TICK INTEGER"""
        p[0] = ClearTickQuery(tick=p[3])

    def p_query_get_tick(self, p: yacc.YaccProduction) -> None:
        """query : GET TICK INTEGER"""
        p[0] = GetTickQuery(tick=p[3])

    def p_query_show_bitmap(self, p: yacc.YaccProduction) -> None:
        """query : SHOW BITMAP"""
        p[0] = ShowBitmapQuery()

    def p_query_show_bitmap_range(self, p: yacc.YaccProduction) -> None:
        """query : SHOW BITMAP tick_range"""
        lower, upper = p[3]
        p[0] = ShowBitmapQuery(tick_lower=lower, tick_upper=upper)

    def p_query_show_info(self, p: yacc.YaccProduction) -> None:
        """query : SHOW INFO"""
        p[0] = ShowInfoQuery()

    def p_tick_range(self, p: yacc.YaccProduction) -> None:
        """tick_range : INTEGER TO INTEGER"""
        p[0] = (p[1], p[3])

    def p_limit_opt(self, p: yacc.YaccProduction) -> None:
        """limit_opt : LIMIT INTEGER
                     | empty"""
        p[0] = p[2] if len(p) == 3 else None

    def p_exact_opt(self, p: yacc.YaccProduction) -> None:
        """exact_opt : EXACT
                     | empty"""
        p[0] = p[1] == "exact"

    def p_fee_list(self, p: yacc.YaccProduction) -> None:
        """fee_list : fee_list fee_item
                    | empty"""
        if len(p) == 3:
            name, value = p[2]
            # Raising here would send yacc into error recovery; parse() reports it instead
            if name in p[1]:
                if self._pending_error is None:
                    self._pending_error = SyntaxError(f"Duplicate '{name}' in set tick")
            else:
                p[1][name] = value
            p[0] = p[1]
        else:
            p[0] = {}

    def p_fee_item(self, p: yacc.YaccProduction) -> None:
        """fee_item : FEE0 INTEGER
                    | FEE1 INTEGER"""
        p[0] = (p[1], p[2])

    def p_empty(self, p: yacc.YaccProduction) -> None:
        """empty :"""
        p[0] = None

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise SyntaxError(f"Syntax error at '{p.value}' (position {p.lexpos})")
        else:
            raise SyntaxError("Syntax error at end of input")

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Query:
        """Parse a query string."""
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self._pending_error = None
        result = self.parser.parse(data, lexer=self.lexer.lexer)
        if self._pending_error is not None:
            raise self._pending_error
        if result is None:
            raise SyntaxError("Empty or incomplete statement")
        return result

    def parse_program(self, data: str) -> list[Query]:
        """Parse a sequence of semicolon-terminated statements."""
        # The language has no string literals, so comments can be dropped up front
        text = re.sub(r"--[^\n]*", "", data)
        return [self.parse(chunk) for chunk in text.split(";") if chunk.strip()]
