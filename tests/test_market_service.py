"""
Tests for the resilient market-data service: candidate walk, fallbacks,
staleness, company overview, news and metrics.
"""

from datetime import timedelta

import pytest

from stockwhisperer.exceptions import UpstreamError, ValidationError
from stockwhisperer.market.schemas import CompanyProfile, DataSource
from stockwhisperer.market.service import parse_daily_series

from conftest import TODAY, daily_payload

RATE_LIMIT = {"Information": "Thank you for using Alpha Vantage! Our standard API rate limit is 25 requests per day."}
INVALID_CALL = {"Error Message": "Invalid API call. Please retry or visit the documentation."}
NOTE = {"Note": "API call frequency exceeded."}


def _assert_valid_series(result):
    dates = [p.date for p in result.points]
    assert dates
    assert dates == sorted(dates)
    assert len(dates) == len(set(dates))


# ============================================================================
# PARSING
# ============================================================================

def test_parse_sorts_ascending_regardless_of_wire_order():
    payload = daily_payload([10.0, 11.0, 12.0])
    assert list(payload["Time Series (Daily)"])[0] > list(payload["Time Series (Daily)"])[-1]

    points = parse_daily_series(payload, "TEST")

    assert [p.close for p in points] == [10.0, 11.0, 12.0]
    assert points[-1].date == TODAY


def test_parse_skips_malformed_records():
    payload = daily_payload([10.0, 11.0, 12.0])
    series = payload["Time Series (Daily)"]
    first = next(iter(series))
    series[first] = {"1. open": "None", "4. close": "oops"}
    series["not-a-date"] = {"1. open": "1", "2. high": "1", "3. low": "1", "4. close": "1", "5. volume": "1"}

    points = parse_daily_series(payload, "TEST")

    assert len(points) == 2


def test_parse_collapses_duplicate_date_spellings():
    payload = daily_payload([10.0, 11.0, 12.0])
    # same session as the latest record, basic ISO spelling
    payload["Time Series (Daily)"][TODAY.strftime("%Y%m%d")] = {
        "1. open": "13.0",
        "2. high": "13.5",
        "3. low": "12.5",
        "4. close": "13.0",
        "5. volume": "900",
    }

    points = parse_daily_series(payload, "TEST")
    dates = [p.date for p in points]

    assert len(points) == 3
    assert len(dates) == len(set(dates))
    assert dates == sorted(dates)
    assert dates[-1] == TODAY


@pytest.mark.parametrize(
    "payload",
    [
        {},
        RATE_LIMIT,
        INVALID_CALL,
        NOTE,
        {"Meta Data": {}},
        {"Meta Data": {}, "Time Series (Daily)": {}},
        {"Time Series (Daily)": {"2024-01-02": {"4. close": "bad"}}},
    ],
)
def test_parse_rejects_failed_payloads(payload):
    with pytest.raises(UpstreamError):
        parse_daily_series(payload, "TEST")


# ============================================================================
# CANDIDATE WALK
# ============================================================================

async def test_first_candidate_success_stops_the_walk(market, provider):
    provider.series["AAPL"] = daily_payload([180.0] * 30)

    result = await market.fetch_series(["AAPL", "AAPL.X"])

    assert result.source is DataSource.alpha_vantage
    assert result.symbol == "AAPL"
    assert provider.series_calls() == ["AAPL"]
    _assert_valid_series(result)


async def test_empty_payload_advances_to_suffixed_candidate(market, provider):
    provider.series["RELIANCE"] = {}
    provider.series["RELIANCE.NS"] = daily_payload([2500.0] * 30)

    candidates = market.resolver.resolve("RELIANCE")
    result = await market.fetch_series(candidates)

    assert candidates[1] == "RELIANCE.NS"
    assert provider.series_calls() == ["RELIANCE", "RELIANCE.NS"]
    assert result.symbol == "RELIANCE.NS"
    assert result.source is DataSource.alpha_vantage


async def test_sentinel_payload_advances_to_sibling_exchange(market, provider):
    provider.series["TCS.NS"] = RATE_LIMIT
    provider.series["TCS.BSE"] = daily_payload([3500.0] * 30)

    result = await market.fetch_series(market.resolver.resolve("TCS.NS"))

    assert provider.series_calls() == ["TCS.NS", "TCS.BSE"]
    assert result.symbol == "TCS.BSE"


async def test_transport_errors_and_timeouts_advance(market, provider):
    provider.series["A"] = UpstreamError("TIME_SERIES_DAILY", "A", "HTTP 503")
    provider.series["B"] = TimeoutError()
    provider.series["C"] = daily_payload([10.0] * 12)

    result = await market.fetch_series(["A", "B", "C"])

    assert provider.series_calls() == ["A", "B", "C"]
    assert result.symbol == "C"


async def test_all_candidates_failing_yields_synthetic_series(market, provider):
    provider.series["RELIANCE"] = {}
    provider.series["RELIANCE.NS"] = INVALID_CALL

    result = await market.fetch_series(["RELIANCE", "RELIANCE.NS"])

    assert provider.series_calls() == ["RELIANCE", "RELIANCE.NS"]
    assert result.source is DataSource.synthetic
    assert result.is_synthetic
    assert result.symbol == "RELIANCE"
    assert result.latest_date == TODAY
    _assert_valid_series(result)


async def test_unclassified_error_propagates_from_fetch_series(market, provider):
    provider.series["AAPL"] = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await market.fetch_series(["AAPL"])


async def test_acquire_series_never_raises_for_unclassified_errors(market, provider):
    provider.series["AAPL"] = RuntimeError("boom")

    result = await market.acquire_series(["AAPL"])

    assert result.is_synthetic
    _assert_valid_series(result)


async def test_empty_candidate_list_rejected(market):
    with pytest.raises(ValidationError):
        await market.acquire_series([])


# ============================================================================
# STALENESS
# ============================================================================

async def test_stale_series_is_flagged_but_returned(market, provider):
    old_end = TODAY - timedelta(days=120)
    payload = daily_payload([50.0 + i for i in range(20)], end=old_end)
    provider.series["OLD"] = payload

    result = await market.fetch_series(["OLD"])

    assert result.is_stale is True
    assert result.source is DataSource.alpha_vantage
    assert len(result.points) == 20
    assert result.latest_date == old_end


async def test_recent_series_is_not_stale(market, provider):
    provider.series["NEW"] = daily_payload([50.0] * 20, end=TODAY - timedelta(days=30))

    result = await market.fetch_series(["NEW"])

    assert result.is_stale is False


# ============================================================================
# COMPANY OVERVIEW
# ============================================================================

async def test_profile_maps_overview_fields(market, provider):
    provider.overview["AAPL"] = {
        "Symbol": "AAPL",
        "Name": "Apple Inc",
        "Description": "Designs phones.",
        "Exchange": "NASDAQ",
        "Sector": "TECHNOLOGY",
        "Industry": "ELECTRONIC COMPUTERS",
        "Address": "ONE APPLE PARK WAY, CUPERTINO, CA, US",
        "FullTimeEmployees": "161000",
        "MarketCapitalization": "2900000000000",
        "PERatio": "29.5",
        "DividendYield": "0.0051",
        "52WeekHigh": "199.62",
        "52WeekLow": "164.08",
    }

    profile = await market.fetch_profile("AAPL")

    assert profile.is_fallback is False
    assert profile.name == "Apple Inc"
    assert profile.employees == 161000
    assert profile.exchange == "NASDAQ"
    assert profile.ceo == "Not available"
    assert profile.pe_ratio == pytest.approx(29.5)
    assert profile.week_52_high == pytest.approx(199.62)


async def test_profile_treats_none_strings_as_missing(market, provider):
    provider.overview["INFY.NS"] = {"Symbol": "INFY.NS", "Name": "Infosys", "PERatio": "None", "Sector": "None"}

    profile = await market.fetch_profile("INFY.NS")

    assert profile.pe_ratio is None
    assert profile.sector == "Not available"
    assert profile.exchange == "NSE"


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-inf", "1e400"])
async def test_profile_treats_non_finite_numbers_as_missing(market, provider, raw):
    provider.overview["AAPL"] = {
        "Symbol": "AAPL",
        "Name": "Apple Inc",
        "FullTimeEmployees": raw,
        "MarketCapitalization": raw,
        "52WeekHigh": raw,
    }

    profile = await market.fetch_profile("AAPL")

    assert profile.is_fallback is False
    assert profile.employees == 0
    assert profile.market_cap is None
    assert profile.week_52_high is None


@pytest.mark.parametrize("answer", [{}, RATE_LIMIT, UpstreamError("OVERVIEW", "X", "HTTP 500"), RuntimeError("boom")])
async def test_profile_falls_back_without_raising(market, provider, answer):
    provider.overview["RELIANCE.BSE"] = answer

    profile = await market.fetch_profile("RELIANCE.BSE")

    assert profile.is_fallback is True
    assert profile.name == "Reliance Industries"
    assert profile.exchange == "BSE"
    assert profile.sector == "Indian Market"
    assert profile.description == "Information not available for Reliance Industries"


async def test_fallback_profile_for_domestic_and_unknown_symbols(market):
    assert market.fallback_profile("MSFT").exchange == "NASDAQ"
    unknown = market.fallback_profile("ZZZZ")
    assert unknown.exchange == "UNKNOWN"
    assert unknown.name == "ZZZZ"
    assert unknown.industry == "Not available"


# ============================================================================
# NEWS
# ============================================================================

async def test_news_uses_base_ticker_and_keeps_latest_three(market, provider):
    provider.news["TCS"] = {
        "feed": [
            {
                "title": f"Story {i}",
                "time_published": "20240613T093000",
                "source": "Wire",
                "summary": "...",
                "url": f"https://example.com/{i}",
            }
            for i in range(5)
        ]
    }

    items = await market.fetch_news("TCS.NS")

    assert ("NEWS_SENTIMENT", "TCS") in provider.calls
    assert [i.title for i in items] == ["Story 0", "Story 1", "Story 2"]
    assert items[0].published_at.year == 2024
    assert items[0].published_at.hour == 9


async def test_news_rate_limit_yields_single_placeholder(market, provider):
    provider.news["AAPL"] = RATE_LIMIT

    items = await market.fetch_news("AAPL")

    assert len(items) == 1
    assert items[0].title == "No recent news found for AAPL"
    assert items[0].url == "#"


@pytest.mark.parametrize("payload", [{}, {"feed": []}, {"feed": "nope"}, {"items": "0"}])
async def test_news_without_feed_yields_placeholder(market, provider, payload):
    provider.news["AAPL"] = payload

    items = await market.fetch_news("AAPL")

    assert len(items) == 1
    assert items[0].title.startswith("No recent news")


async def test_news_transport_failure_yields_error_placeholder(market, provider):
    provider.news["AAPL"] = UpstreamError("NEWS_SENTIMENT", "AAPL", "HTTP 500")

    items = await market.fetch_news("AAPL")

    assert len(items) == 1
    assert items[0].title == "Could not retrieve news for AAPL"


# ============================================================================
# METRICS
# ============================================================================

async def test_metrics_prefer_overview_fundamentals(market, provider):
    provider.series["AAPL"] = daily_payload([150.0, 160.0, 170.0])
    series = await market.fetch_series(["AAPL"])
    profile = CompanyProfile(
        symbol="AAPL",
        name="Apple",
        description="",
        industry="",
        sector="",
        market_cap=3.0e12,
        pe_ratio=30.0,
        dividend_yield=0.005,
        week_52_high=200.0,
        week_52_low=120.0,
    )

    metrics = market.build_metrics(series, profile)

    assert metrics.market_cap == 3.0e12
    assert metrics.dividend_yield == pytest.approx(0.5)
    assert metrics.week_52_high == 200.0
    assert metrics.week_52_low == 120.0
    assert metrics.volume == series.points[-1].volume


async def test_metrics_fall_back_to_trailing_year_of_series(market, provider):
    closes = [500.0] + [100.0 + i for i in range(300)]
    provider.series["ZZZZ"] = daily_payload(closes)
    series = await market.fetch_series(["ZZZZ"])

    metrics = market.build_metrics(series, market.fallback_profile("ZZZZ"))

    # the 500.0 close is more than a year before the latest session
    assert metrics.week_52_high == 399.0
    assert metrics.market_cap == 0.0
    assert metrics.pe_ratio == 0.0
