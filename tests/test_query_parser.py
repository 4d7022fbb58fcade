"""Tests for the tick lens query parser."""

import pytest

from tick_lens.parsing.query_lexer import QueryLexer
from tick_lens.parsing.query_parser import (
    ClearTickQuery,
    CollectQuery,
    GetTickQuery,
    QueryParser,
    ScanQuery,
    SetTickQuery,
    ShowBitmapQuery,
    ShowInfoQuery,
)


class TestQueryLexer:
    """Tests for the query lexer."""

    def test_tokenize_scan(self):
        """Test tokenizing a scan query."""
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("scan -120 to 120 limit 2;")
        token_types = [t.type for t in tokens]

        assert token_types == ["SCAN", "INTEGER", "TO", "INTEGER", "LIMIT", "INTEGER", "SEMICOLON"]
        assert tokens[1].value == -120

    def test_keywords_case_insensitive(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("SHOW Info")
        assert [t.type for t in tokens] == ["SHOW", "INFO"]

    def test_hex_integers(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("0xff -0x10 007")
        assert [t.value for t in tokens] == [255, -16, 7]

    def test_comments_ignored(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("show info -- everything\n")
        assert [t.type for t in tokens] == ["SHOW", "INFO"]

    def test_unknown_keyword(self):
        lexer = QueryLexer()
        lexer.build()

        with pytest.raises(SyntaxError, match="Unknown keyword"):
            lexer.tokenize("select 1")

    def test_illegal_character(self):
        lexer = QueryLexer()
        lexer.build()

        with pytest.raises(SyntaxError):
            lexer.tokenize("scan 1 to 2 @")


class TestQueryParser:
    """Tests for the query parser."""

    def test_scan(self):
        query = QueryParser().parse("scan -120 to 120;")
        assert query == ScanQuery(tick_lower=-120, tick_upper=120)

    def test_scan_limit_exact(self):
        query = QueryParser().parse("scan 0 to 600 limit 5 exact")
        assert query == ScanQuery(tick_lower=0, tick_upper=600, limit=5, exact=True)

    def test_collect(self):
        query = QueryParser().parse("collect -60 to 60 limit 1;")
        assert query == CollectQuery(tick_lower=-60, tick_upper=60, limit=1)

    def test_set_tick(self):
        query = QueryParser().parse("set tick 60 gross 100 net -100")
        assert query == SetTickQuery(tick=60, liquidity_gross=100, liquidity_net=-100)

    def test_set_tick_with_fees(self):
        query = QueryParser().parse("set tick 60 gross 1 net 1 fee1 0x20 fee0 7;")
        assert isinstance(query, SetTickQuery)
        assert query.fee_growth_outside_0_x128 == 7
        assert query.fee_growth_outside_1_x128 == 32

    def test_set_tick_duplicate_fee(self):
        with pytest.raises(SyntaxError, match="Duplicate 'fee0'"):
            QueryParser().parse("set tick 60 gross 1 net 1 fee0 1 fee0 2")

    def test_duplicate_fee_does_not_leak_into_next_parse(self):
        parser = QueryParser()
        with pytest.raises(SyntaxError):
            parser.parse("set tick 60 gross 1 net 1 fee1 1 fee1 2;")

        query = parser.parse("set tick 60 gross 1 net 1 fee1 2;")
        assert query.fee_growth_outside_1_x128 == 2

    def test_empty_statement(self):
        with pytest.raises(SyntaxError):
            QueryParser().parse("")

    def test_clear_and_get(self):
        parser = QueryParser()
        assert parser.parse("clear tick -60") == ClearTickQuery(tick=-60)
        assert parser.parse("get tick 0;") == GetTickQuery(tick=0)

    def test_show(self):
        parser = QueryParser()
        assert parser.parse("show bitmap") == ShowBitmapQuery()
        assert parser.parse("show bitmap -10 to 10") == ShowBitmapQuery(tick_lower=-10, tick_upper=10)
        assert parser.parse("show info;") == ShowInfoQuery()

    def test_syntax_error(self):
        with pytest.raises(SyntaxError):
            QueryParser().parse("scan 1 limit 2")

    def test_syntax_error_at_end(self):
        with pytest.raises(SyntaxError, match="end of input"):
            QueryParser().parse("scan 1 to")

    def test_parse_program(self):
        program = """
        -- populate; then scan
        set tick 0 gross 1 net 1;
        set tick 60 gross 1 net -1;
        scan 0 to 60 limit 1;
        """
        queries = QueryParser().parse_program(program)

        assert [type(q) for q in queries] == [SetTickQuery, SetTickQuery, ScanQuery]
