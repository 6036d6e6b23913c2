"""
Integration тесты для EmailParsingPipeline (Stage 1-7).

Проверяет полный путь HTML -> CleanedText -> StructuredOrderRecord
на письмах, похожих на реальные уведомления магазинов.
"""

from datetime import date
from decimal import Decimal

import pytest

from contracts.order_record_dto import OrderStatus, Platform
from src.parsing import EmailParsingPipeline, clean_text, parse_email


FLIPKART_HTML = """
<html><head>
<style type="text/css">.hdr { color: red; font-size: 12px; }</style>
<script>trackOpen('abc');</script>
</head>
<body>
<div>Hi Rahul,</div>
<p>Your order has been shipped via Ekart Logistics.</p>
<table>
  <tr><td>Order ID:</td><td>OD123456789012345</td></tr>
  <tr><td>Item:</td><td><span>Wireless Mouse - Black</span></td></tr>
  <tr><td>Amount Paid:</td><td>â‚¹1,299.00</td></tr>
</table>
<p>Delivery by Friday, March 15, 2024</p>
<p>Tracking ID: FMPP1234567890</p>
<p>Earn SuperCoin on every order</p>
<p>Unsubscribe from these emails</p>
<a href="https://www.flipkart.com/account/orders">View Order</a>
<!-- open pixel --><img src="https://img.example.com/p.gif" alt="">
<p>&copy; 2024 Flipkart Internet &amp; Co.</p>
</body></html>
"""

AMAZON_HTML = """
<div>Hello,</div>
<div>Thank you for your order.</div>
<div>Order #123-4567890-1234567</div>
<div>Order Total: Rs. 2,349.00</div>
<div>Arriving on Monday, 18 March 2024</div>
<div>Amazon Prime members get FREE delivery</div>
"""


@pytest.fixture
def pipeline():
    return EmailParsingPipeline()


class TestFlipkartEmail:

    def test_record(self, pipeline):
        result = pipeline.process(FLIPKART_HTML, Platform.FLIPKART)
        record = result.record

        assert record.order_id == "OD123456789012345"
        assert record.amount == Decimal("1299.00")
        assert record.product_name == "Wireless Mouse - Black"
        assert record.expected_delivery == date(2024, 3, 15)
        assert record.carrier_name == "Ekart Logistics"
        assert record.tracking_id == "FMPP1234567890"

        assert result.extraction.status == OrderStatus.SHIPPED
        assert result.extraction.confidence == 1.0

    def test_cleaned_text(self, pipeline):
        text = pipeline.process(FLIPKART_HTML, "flipkart").cleaned_text

        assert "<" not in text
        assert ">" not in text
        assert "&amp;" not in text
        assert "&copy;" not in text
        assert "trackOpen" not in text
        assert "color: red" not in text
        assert "https://" not in text
        assert "Unsubscribe" not in text
        assert "View Order" not in text
        assert "Wireless Mouse - Black" in text
        assert "Amount Paid: ₹1,299.00" in text
        assert "© 2024 Flipkart Internet & Co." in text

    def test_refined_text_drops_loyalty_promo(self, pipeline):
        result = pipeline.process(FLIPKART_HTML, "flipkart")
        assert "SuperCoin" in result.cleaned_text
        assert "SuperCoin" not in result.refined_text

    def test_debug_snapshots(self, pipeline):
        result = pipeline.process(FLIPKART_HTML, "flipkart")
        data = result.to_dict()

        assert result.stages_completed == 7
        assert data["platform"] == "flipkart"
        assert "â‚¹" not in data["encoding"]["text"]
        assert "<td>" in data["encoding"]["text"]
        assert "<td>" not in data["tags"]["text"]
        assert "&amp;" in data["whitespace"]["text"]
        assert "&amp;" not in data["entities"]["text"]
        assert data["extraction"]["record"]["orderId"] == "OD123456789012345"
        assert data["truncated"] is False


class TestAmazonEmail:

    def test_record(self, pipeline):
        record = pipeline.process(AMAZON_HTML, "amazon").record

        assert record.order_id == "123-4567890-1234567"
        assert record.amount == Decimal("2349.00")
        assert record.expected_delivery == date(2024, 3, 18)

    def test_status_and_refinement(self, pipeline):
        result = pipeline.process(AMAZON_HTML, "amazon")
        assert result.extraction.status == OrderStatus.CONFIRMED
        assert "Amazon Prime" not in result.refined_text


class TestDegradation:

    def test_unknown_platform_treated_as_generic(self):
        record = parse_email("<p>Rs. 2,500</p>", "ebay")
        assert record.amount == Decimal("2500")

    def test_impossible_delivery_date_absent(self):
        record = parse_email("<p>Order ID: OD123456789012345</p><p>Delivery by February 30, 2024</p>", "flipkart")
        assert record.order_id == "OD123456789012345"
        assert record.expected_delivery is None

    @pytest.mark.parametrize("html", [
        "",
        None,
        "<<<>>>&&&#;;",
        "<div><p><span>unclosed",
        "<script>never closed",
        "&#xFFFFFFFF; &#99999999;",
    ])
    def test_malformed_input_never_raises(self, pipeline, html):
        result = pipeline.process(html, "generic")
        assert "<" not in result.cleaned_text
        assert ">" not in result.cleaned_text
        assert result.stages_completed == 7

    def test_empty_input_gives_empty_record(self):
        assert parse_email("").is_empty

    def test_truncation(self):
        pipeline = EmailParsingPipeline(max_html_chars=16)
        result = pipeline.process("<p>Order ID: OD123456789012345</p>")

        assert result.truncated
        assert result.input_chars == 34
        assert result.record.order_id is None

    def test_input_not_mutated(self, pipeline):
        html = FLIPKART_HTML
        pipeline.process(html, "flipkart")
        assert html == FLIPKART_HTML


class TestCleanText:

    def test_clean_text_matches_pipeline(self, pipeline):
        assert clean_text(FLIPKART_HTML) == pipeline.process(FLIPKART_HTML, "flipkart").cleaned_text

    def test_clean_only_runs_five_stages(self, pipeline):
        result = pipeline.clean("<p>Hello &amp; welcome</p>")
        assert result.cleaned_text == "Hello & welcome"
        assert result.stages_completed == 5
        assert result.extraction is None

    def test_cleaning_is_deterministic(self):
        assert clean_text(FLIPKART_HTML) == clean_text(FLIPKART_HTML)

    def test_deep_escape_chain_fully_decoded(self):
        text = clean_text("<p>Order &" + "#38;" * 10 + "amp; Co</p>")
        assert text == "Order & Co"
        assert "&#38;" not in text


class TestDeterminism:
    """Результат - функция только от (html, platform)."""

    @pytest.mark.parametrize("html, platform", [
        (FLIPKART_HTML, Platform.FLIPKART),
        (AMAZON_HTML, Platform.AMAZON),
        (FLIPKART_HTML, "generic"),
        ("<p>Rs. 2,500</p>", "ebay"),
    ])
    def test_process_is_deterministic(self, pipeline, html, platform):
        first = pipeline.process(html, platform)
        second = EmailParsingPipeline().process(html, platform)

        assert first.record == second.record
        assert first.extraction.to_dict() == second.extraction.to_dict()
        assert first.cleaned_text == second.cleaned_text
        assert first.refined_text == second.refined_text
