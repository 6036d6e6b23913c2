"""
Unit-тесты для Stage 7: Platform Post-Processing.
"""

import pytest

from contracts.order_record_dto import Platform
from src.parsing.stages.stage_7_platform import PlatformStage


@pytest.fixture
def stage():
    return PlatformStage()


class TestPlatformStage:

    def test_flipkart_removes_loyalty_promos(self, stage):
        text = "Thanks for shopping\nEarn SuperCoin on every order\nFlipkart Plus members save more\nEnd"
        result = stage.process(text, Platform.FLIPKART)

        assert "SuperCoin" not in result.text
        assert "Flipkart Plus" not in result.text
        assert "Thanks for shopping" in result.text
        assert "End" in result.text
        assert result.removals_applied == 2

    def test_amazon_removes_prime(self, stage):
        result = stage.process("Order placed\nAmazon Prime: free delivery\nYour account settings", "amazon")
        assert result.text == "Order placed"

    def test_myntra_removes_insider(self, stage):
        result = stage.process("Shipped\nMyntra Insider points: 20", "myntra")
        assert result.text == "Shipped"

    @pytest.mark.parametrize("platform", [Platform.GENERIC, "ebay", None, "blinkit"])
    def test_identity_without_removals(self, stage, platform):
        text = "SuperCoin\n\n  Amazon Prime  "
        result = stage.process(text, platform)
        assert result.text == text
        assert result.removals_applied == 0
