"""
Unit tests for seller online/joined metadata and avatar extraction.
"""
import unittest

from market_mirror.extraction.seller_meta import (extract_online_and_joined,
                                                  extract_seller_image_url,
                                                  extract_seller_meta_fallback)


class TestOnlineAndJoined(unittest.TestCase):
    """Test cases for the metadata region."""

    def test_region_values(self):
        html = (
            '<div class="reginald Bp1">'
            "<span>Online</span> <b>Today</b>"
            "<div>joined March 2021</div>"
            "</div>"
        )
        meta = extract_online_and_joined(html)
        self.assertEqual(meta.online_status, "today")
        self.assertEqual(meta.joined_text, "March 2021")

    def test_missing_region(self):
        meta = extract_online_and_joined("<div>online today</div>")
        self.assertIsNone(meta.online_status)
        self.assertIsNone(meta.joined_text)

    def test_fallback_scans_whole_page(self):
        html = "<p>Seller was online yesterday.</p><p>Joined Jan 2020 and more text</p>"
        meta = extract_seller_meta_fallback(html)
        self.assertEqual(meta.online_status, "yesterday")
        self.assertEqual(meta.joined_text, "Jan 2020")

    def test_fallback_ignores_loose_mentions(self):
        meta = extract_seller_meta_fallback("<p>shop online with us; joined forces</p>")
        self.assertIsNone(meta.online_status)
        self.assertIsNone(meta.joined_text)


class TestSellerImage(unittest.TestCase):
    """Test cases for avatar selection."""

    def test_prefers_data_src(self):
        html = '<img class="softened" data-src="/images/u/a.jpg" src="/images/u/b.jpg">'
        self.assertEqual(extract_seller_image_url(html), "/images/u/a.jpg")

    def test_srcset_first_url(self):
        html = '<img class="softened" srcset="/images/u/s1.jpg 1x, /images/u/s2.jpg 2x" src="/x.jpg">'
        self.assertEqual(extract_seller_image_url(html), "/images/u/s1.jpg")

    def test_placeholder_falls_back_to_data_src(self):
        html = (
            '<img class="softened" srcset="/static/spinner-bert.gif 1x" '
            'src="/static/spinner-bert.gif">'
        )
        self.assertIsNone(extract_seller_image_url(html))

    def test_src_not_confused_with_data_src(self):
        html = '<img class="softened" data-src="/images/u/real.png">'
        self.assertEqual(extract_seller_image_url(html), "/images/u/real.png")

    def test_fallback_scan_for_real_asset(self):
        html = (
            '<img class="logo" src="/static/logo.png">'
            '<img class="avatar" src="/images/u/42.jpg">'
        )
        self.assertEqual(extract_seller_image_url(html), "/images/u/42.jpg")

    def test_primary_without_real_asset_still_returned(self):
        html = '<img class="softened round" src="https://cdn.test/avatar.jpg">'
        self.assertEqual(extract_seller_image_url(html), "https://cdn.test/avatar.jpg")

    def test_placeholder_primary_skipped_for_real_asset(self):
        html = (
            '<img class="softened" src="/static/spinner-bert.gif">'
            '<img src="/images/u/7.jpg">'
        )
        self.assertEqual(extract_seller_image_url(html), "/images/u/7.jpg")

    def test_no_images(self):
        self.assertIsNone(extract_seller_image_url("<p>nothing</p>"))
        self.assertIsNone(extract_seller_image_url(""))
        self.assertIsNone(extract_seller_image_url(None))


if __name__ == "__main__":
    unittest.main()
