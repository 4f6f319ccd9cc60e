"""
Unit tests for the seller crawler, focusing on SellerCrawler endpoints.
"""
import aiohttp
import pytest

from market_mirror.crawler.base import SellerCrawler, seller_page_complete, unwrap_message
from market_mirror.crawler.exceptions import UpstreamHTTPError

PROFILE_HTML = (
    '<html><body><div class="reginald Bp1">online today</div>'
    '<div class="reginald Bp3">Hi</div></body></html>'
)


class TestSellerCrawler:
    """Test suite for SellerCrawler."""

    @pytest.mark.asyncio
    async def test_init(self, crawler_config):
        crawler = SellerCrawler(config=crawler_config)
        assert crawler.config == crawler_config
        assert crawler.session is None
        assert crawler.failover.hosts == ["https://a.test", "https://b.test"]

    @pytest.mark.asyncio
    async def test_setup_and_cleanup(self, crawler_config):
        """An owned session carries the user agent and is closed on exit."""
        async with SellerCrawler(config=crawler_config) as crawler:
            session = crawler.session
            assert isinstance(session, aiohttp.ClientSession)
            assert session.headers.get("User-Agent") == "Test User Agent"
        assert session.closed

    @pytest.mark.asyncio
    async def test_shared_session_is_not_closed(self, crawler_config, fake_session):
        session = fake_session()
        crawler = SellerCrawler(config=crawler_config, session=session)
        await crawler.cleanup()
        assert not session.closed

    @pytest.mark.asyncio
    async def test_fetch_seller_page(self, crawler_config, fake_session, make_html_response):
        session = fake_session({
            "https://a.test/viewSubject/p/42": make_html_response(PROFILE_HTML),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_seller_page(42)

        assert result.html == PROFILE_HTML
        assert result.source_url == "https://a.test/viewSubject/p/42"
        assert result.byte_count == len(PROFILE_HTML.encode())
        assert result.elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_fetch_seller_page_fails_over_on_5xx(
        self, crawler_config, fake_session, fake_response, make_html_response
    ):
        session = fake_session({
            "https://a.test/viewSubject/p/42": fake_response(status=503),
            "https://b.test/viewSubject/p/42": make_html_response(PROFILE_HTML),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_seller_page("42")

        assert result.source_url == "https://b.test/viewSubject/p/42"
        assert session.urls() == [
            "https://a.test/viewSubject/p/42",
            "https://b.test/viewSubject/p/42",
        ]

    @pytest.mark.asyncio
    async def test_fetch_seller_page_stops_on_4xx(self, crawler_config, fake_session, fake_response):
        session = fake_session({
            "https://a.test/viewSubject/p/42": fake_response(status=404),
            "https://b.test/viewSubject/p/42": fake_response(status=200, chunks=[b"x"]),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        with pytest.raises(UpstreamHTTPError) as exc_info:
            await crawler.fetch_seller_page(42)

        assert exc_info.value.status == 404
        assert session.urls() == ["https://a.test/viewSubject/p/42"]

    @pytest.mark.asyncio
    async def test_fetch_seller_page_early_abort(
        self, crawler_config, fake_session, make_html_response
    ):
        html = (
            '<div class="reginald Bp1">online today</div>'
            '<div class="reginald Bp3"><div class="Bp0 gone">manifesto</div>bio</div>'
            '<form class="shareForm"><input name="contextId" value="1"></form>'
            + "x" * 20000
        )
        session = fake_session({"https://a.test/viewSubject/p/7": make_html_response(html)})
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_seller_page(7, early_abort=True, early_abort_min_bytes=64)

        assert result.byte_count == 4096
        assert len(result.html) == 4096

    @pytest.mark.asyncio
    async def test_metadata_block_alone_does_not_stop_the_read(
        self, crawler_config, fake_session, make_html_response
    ):
        """The manifesto region after the metadata block must still arrive."""
        html = '<div class="reginald Bp1">online today</div>' + "x" * 9000 + "manifesto"
        session = fake_session({"https://a.test/viewSubject/p/7": make_html_response(html)})
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_seller_page(7, early_abort=True, early_abort_min_bytes=64)

        assert result.html == html
        assert result.byte_count == len(html)

    @pytest.mark.asyncio
    async def test_fetch_seller_page_byte_cap(self, crawler_config, fake_session, make_html_response):
        session = fake_session({"https://a.test/viewSubject/p/7": make_html_response("y" * 10000)})
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_seller_page(7, max_bytes=5000)

        assert len(result.html) == 4096
        assert result.byte_count > 5000

    @pytest.mark.asyncio
    async def test_fetch_user_summary_envelope(self, crawler_config, fake_session, make_json_response):
        session = fake_session({
            "https://a.test/core/api/getUserSummary/p/9": make_json_response({
                "message": {"summary": {"rating": 4.9}, "statistics": {"disputes": 0}}
            }),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_user_summary(9)

        assert result.summary == {"rating": 4.9}
        assert result.statistics == {"disputes": 0}
        assert result.source_url == "https://a.test/core/api/getUserSummary/p/9"

    @pytest.mark.asyncio
    async def test_fetch_user_summary_without_envelope(
        self, crawler_config, fake_session, make_json_response
    ):
        session = fake_session({
            "https://a.test/core/api/getUserSummary/p/9": make_json_response({
                "summary": {"rating": 4.1},
                "seller": {"statistics": {"orders": 12}},
            }),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_user_summary(9)

        assert result.summary == {"rating": 4.1}
        assert result.statistics == {"orders": 12}

    @pytest.mark.asyncio
    async def test_fetch_user_summary_non_object(self, crawler_config, fake_session, make_json_response):
        session = fake_session({
            "https://a.test/core/api/getUserSummary/p/9": make_json_response(["unexpected"]),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.fetch_user_summary(9)

        assert result.summary is None
        assert result.statistics is None
        assert result.raw == {}


class TestLocationFilter:
    """Test suite for set_location_filter."""

    @pytest.mark.asyncio
    async def test_not_attempted_without_country(self, crawler_config, fake_session):
        session = fake_session()
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.set_location_filter(None)

        assert result.attempted is False
        assert result.ok is False
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_posts_form_without_following_redirects(
        self, crawler_config, fake_session, fake_response
    ):
        session = fake_session({"https://a.test/setLocationFilter": fake_response(status=200)})
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.set_location_filter("GB", {"_sourcePage": "abc"})

        assert result.ok is True
        assert result.status == 200
        call = session.calls[0]
        assert call["method"] == "POST"
        assert call["allow_redirects"] is False
        assert isinstance(call["data"], aiohttp.MultipartWriter)

    @pytest.mark.asyncio
    async def test_redirect_is_not_ok(self, crawler_config, fake_session, fake_response):
        session = fake_session({"https://a.test/setLocationFilter": fake_response(status=302)})
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.set_location_filter("GB")

        assert result.ok is False
        assert result.attempted is True
        assert result.status == 302

    @pytest.mark.asyncio
    async def test_network_error_is_reported(self, crawler_config, fake_session):
        session = fake_session({
            "https://a.test/setLocationFilter": aiohttp.ClientConnectionError("refused"),
        })
        crawler = SellerCrawler(config=crawler_config, session=session)

        result = await crawler.set_location_filter("GB")

        assert result.ok is False
        assert result.attempted is True
        assert result.error == "refused"


def test_unwrap_message():
    assert unwrap_message({"message": {"a": 1}}) == {"a": 1}
    assert unwrap_message({"message": "text"}) == {}
    assert unwrap_message({}) == {}


def test_seller_page_complete():
    assert seller_page_complete('manifesto ... <form class="shareForm">')
    assert seller_page_complete('Manifesto <input name="contextRefNum" value="9">')
    assert not seller_page_complete('<div class="reginald Bp1">online today</div>')
    assert not seller_page_complete("manifesto without the form")
