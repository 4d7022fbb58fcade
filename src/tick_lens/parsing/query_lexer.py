"""Lexer for the tick lens query language."""

import ply.lex as lex


class QueryLexer:
    """Lexer for tokenizing tick lens queries."""

    # Reserved keywords
    reserved = {
        "scan": "SCAN",
        "collect": "COLLECT",
        "to": "TO",
        "limit": "LIMIT",
        "exact": "EXACT",
        "set": "SET",
        "tick": "TICK",
        "gross": "GROSS",
        "net": "NET",
        "fee0": "FEE0",
        "fee1": "FEE1",
        "clear": "CLEAR",
        "get": "GET",
        "show": "SHOW",
        "bitmap": "BITMAP",
        "info": "INFO",
    }

    # Token list
    tokens = [
        "INTEGER",
        "SEMICOLON",
    ] + list(reserved.values())

    # Ignored characters (semicolons are the statement terminator)
    t_ignore = " \t"

    t_SEMICOLON = r";"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?(?:0[xX][0-9a-fA-F]+|\d+)"
        text = t.value
        sign = -1 if text.startswith("-") else 1
        digits = text.lstrip("-")
        if digits[:2].lower() == "0x":
            t.value = sign * int(digits[2:], 16)
        else:
            t.value = sign * int(digits)
        return t

    def t_KEYWORD(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        # Keywords are case-insensitive; there are no free identifiers
        keyword = t.value.lower()
        if keyword not in self.reserved:
            raise SyntaxError(f"Unknown keyword '{t.value}' at position {t.lexpos}")
        t.type = self.reserved[keyword]
        t.value = keyword
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass  # Ignore comments

    def t_error(self, t: lex.LexToken) -> None:
        raise SyntaxError(f"Illegal character '{t.value[0]}' at position {t.lexpos}")

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens


# Module-level set of reserved keywords (lowercase) for use by other modules
RESERVED_KEYWORDS: frozenset[str] = frozenset(QueryLexer.reserved.keys())
