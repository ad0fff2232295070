"""Stock ticker detection and quote lookup through the tool executor."""

from __future__ import annotations

import re
from typing import Callable

from clawlite.orchestrator import ToolCall

PRICE_USAGE = "Usage: /price <ticker>"

_TICKER_PATTERN = re.compile(r"(?i)\$?[A-Z]{1,5}(?:\.[A-Z]{1,3})?")

_STOCK_KEYWORDS = ("股价", "行情", "price", "quote", "ticker", "stock")

_STOPWORDS = frozenset({
    "PRICE", "STOCK", "QUOTE", "TICKER",
    "WHAT", "WHATS", "IS", "THE", "OF", "FOR",
    "LATEST", "CURRENT", "TODAY", "NOW", "CAN",
    "YOU", "TELL", "ME", "PLEASE",
})

ToolExecute = Callable[[ToolCall], str]


class QuoteLookupError(Exception):
    """No quote could be obtained for a ticker."""


def extract_ticker_from_stock_query(text: str) -> str | None:
    """Return the ticker a stock question asks about, or None if it is not one."""
    lower = text.strip().lower()
    if not lower:
        return None
    if not any(keyword in lower for keyword in _STOCK_KEYWORDS):
        return None
    for candidate in reversed(_TICKER_PATTERN.findall(text)):
        ticker = candidate.strip().removeprefix("$").upper()
        if ticker not in _STOPWORDS:
            return ticker
    return None


def normalize_ticker(ticker: str) -> str:
    """Drop a leading '$', trim and upper-case a ticker; raise if nothing is left."""
    normalized = ticker.removeprefix("$").strip().upper()
    if not normalized:
        raise QuoteLookupError("stock ticker is required")
    return normalized


def _try_tool(execute: ToolExecute, call: ToolCall) -> tuple[str, Exception | None]:
    try:
        return execute(call), None
    except Exception as exc:  # any tool failure falls through to the next source
        return "", exc


def lookup_stock_quote(execute: ToolExecute, ticker: str) -> str:
    """Ask the stock_price tool for a quote, falling back to a web search."""
    normalized = normalize_ticker(ticker)

    stock_reply, stock_err = _try_tool(execute, ToolCall(name="stock_price", query=normalized))
    if stock_err is None and stock_reply.strip():
        return stock_reply

    search_query = f"{normalized} stock price latest"
    search_reply, search_err = _try_tool(execute, ToolCall(name="web_search", query=search_query))
    if search_err is None and search_reply.strip():
        return search_reply

    if stock_err is not None and search_err is not None:
        raise QuoteLookupError(
            f"stock_price failed: {stock_err}; web_search failed: {search_err}"
        ) from stock_err
    if stock_err is not None:
        raise QuoteLookupError(str(stock_err)) from stock_err
    if search_err is not None:
        raise QuoteLookupError(str(search_err)) from search_err
    raise QuoteLookupError("empty quote response")


def price_command_reply(execute: ToolExecute, text: str) -> str:
    """Answer a '/price <ticker>' command with a quote, usage text or a failure note."""
    parts = text.split()
    if len(parts) < 2:
        return PRICE_USAGE
    ticker = parts[1].strip()
    if not ticker:
        return PRICE_USAGE
    try:
        return lookup_stock_quote(execute, ticker)
    except QuoteLookupError:
        return f"quote lookup failed for {ticker.upper()}. Please try again later."