"""Parsing module for the tick lens query language."""

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

__all__ = [
    "ClearTickQuery",
    "CollectQuery",
    "GetTickQuery",
    "QueryParser",
    "ScanQuery",
    "SetTickQuery",
    "ShowBitmapQuery",
    "ShowInfoQuery",
]
