import pytest

from contracts.order_record_dto import OrderStatus, Platform
from src.parsing.domain.exceptions import (
    InvalidPatternError,
    ParsingConfigurationError,
    PlatformConfigNotFoundError,
)
from src.parsing.platforms.config_loader import (
    EXTRACTION_FIELDS,
    ConfigLoader,
    ExtractionPattern,
    PlatformConfig,
)

# Mock data
MOCK_BASE_YAML = r"""
common_amount:
  - pattern: 'Total[:\s]*₹\s*([\d,]+)'
    specificity: 80
    description: base total

nested_amount:
  - $extends: common_amount
  - pattern: '₹\s*([\d,]+)'
    specificity: 30

status_keywords:
  - status: delivered
    keywords: ["Delivered"]
"""

MOCK_GENERIC_YAML = r"""
platform: generic

order_id:
  - pattern: 'Order\s*ID[:\s]*([A-Z0-9]{6,})'
    specificity: 100

amount:
  - $extends: nested_amount

product_name:
  - pattern: 'Item:\s*(.+)'

status_keywords:
  - $extends: status_keywords
"""

MOCK_SHOP_YAML = r"""
platform: shop

order_id:
  - pattern: '(SH\d{6})'
    specificity: 10
    description: low
  - pattern: 'Order\s*(SH\d{6})'
    specificity: 90
    description: high
  - pattern: 'Ref\s*(SH\d{6})'
    specificity: 90
    description: high second
  - "$extends: missing_key"

trailing_removals:
  - 'Shop Club.*$'
"""


@pytest.fixture
def config_dir(tmp_path):
    """Создаёт временные base.yaml, generic и shop конфиги."""
    (tmp_path / "base.yaml").write_text(MOCK_BASE_YAML, encoding="utf-8")

    generic_dir = tmp_path / "generic"
    generic_dir.mkdir()
    (generic_dir / "parsing.yaml").write_text(MOCK_GENERIC_YAML, encoding="utf-8")

    shop_dir = tmp_path / "shop"
    shop_dir.mkdir()
    (shop_dir / "parsing.yaml").write_text(MOCK_SHOP_YAML, encoding="utf-8")

    return tmp_path


def write_platform(config_dir, name, content):
    platform_dir = config_dir / name
    platform_dir.mkdir(exist_ok=True)
    (platform_dir / "parsing.yaml").write_text(content, encoding="utf-8")


def test_resolve_extends_list(config_dir):
    """$extends в обоих форматах, включая вложенное наследование."""
    base_config = PlatformConfig._load_base_config(config_dir)

    resolved = PlatformConfig._resolve_extends(["$extends: common_amount", "local"], base_config)
    assert len(resolved) == 2
    assert resolved[0]["description"] == "base total"
    assert resolved[1] == "local"

    resolved = PlatformConfig._resolve_extends([{"$extends": "nested_amount"}], base_config)
    assert [p["specificity"] for p in resolved] == [80, 30]


def test_resolve_extends_missing_key(config_dir):
    """Отсутствующий ключ пропускается с warning."""
    base_config = PlatformConfig._load_base_config(config_dir)
    assert PlatformConfig._resolve_extends(["$extends: nope", "local"], base_config) == ["local"]


def test_generic_config_loaded(config_dir):
    config = PlatformConfig.load("generic", config_dir)

    assert config.platform == "generic"
    assert [p.specificity for p in config.amount] == [80, 30]
    assert config.status_keywords[0].status == OrderStatus.DELIVERED
    assert config.status_keywords[0].keywords == ("delivered",)
    assert config.trailing_removals == ()


def test_platform_patterns_sorted_stable(config_dir):
    """Сортировка по specificity (убывание), YAML порядок при равенстве."""
    config = PlatformConfig.load("shop", config_dir)
    assert [p.description for p in config.order_id] == ["high", "high second", "low"]


def test_missing_fields_inherited_from_generic(config_dir):
    generic = PlatformConfig.load("generic", config_dir)
    shop = PlatformConfig.load("shop", config_dir)

    assert shop.amount == generic.amount
    assert shop.product_name == generic.product_name
    assert shop.status_keywords == generic.status_keywords
    assert shop.trailing_removals == ("Shop Club.*$",)


def test_unknown_platform_falls_back_to_generic(config_dir):
    generic = PlatformConfig.load("generic", config_dir)
    assert PlatformConfig.load("unknown_shop", config_dir) is generic


def test_config_cached(config_dir):
    loader = ConfigLoader(config_dir)
    assert loader.load("shop") is loader.load("SHOP")


def test_missing_generic_raises(tmp_path):
    with pytest.raises(PlatformConfigNotFoundError):
        PlatformConfig.load("generic", tmp_path)


def test_invalid_regex_raises(config_dir):
    write_platform(config_dir, "broken", "order_id:\n  - pattern: '(unclosed'\n")
    with pytest.raises(InvalidPatternError):
        PlatformConfig.load("broken", config_dir)


def test_missing_group_raises(config_dir):
    write_platform(config_dir, "nogroup", "order_id:\n  - pattern: 'Order'\n    group: 1\n")
    with pytest.raises(InvalidPatternError):
        PlatformConfig.load("nogroup", config_dir)


def test_malformed_yaml_raises(config_dir):
    write_platform(config_dir, "badyaml", "order_id: [unclosed\n")
    with pytest.raises(ParsingConfigurationError):
        PlatformConfig.load("badyaml", config_dir)


def test_invalid_removal_raises(config_dir):
    write_platform(config_dir, "badremoval", "trailing_removals:\n  - '(oops'\n")
    with pytest.raises(ParsingConfigurationError):
        PlatformConfig.load("badremoval", config_dir)


class TestExtractionPattern:

    def test_flags_validated(self):
        with pytest.raises(ValueError):
            ExtractionPattern(pattern="(x)", flags="ix")

    def test_regex_compiled_with_flags(self):
        pattern = ExtractionPattern(pattern="^order (\\d+)", flags="mi")
        assert pattern.flags == "im"
        assert pattern.regex.search("x\nORDER 42").group(1) == "42"

    def test_frozen(self):
        pattern = ExtractionPattern(pattern="(x)")
        with pytest.raises(ValueError):
            pattern.specificity = 1


class TestShippedConfigs:
    """Реальные YAML конфиги из src/parsing/platforms."""

    @pytest.mark.parametrize("platform", [p.value for p in Platform])
    def test_every_platform_loads(self, platform):
        config = ConfigLoader().load(platform)
        for field_name in EXTRACTION_FIELDS:
            assert config.patterns_for(field_name), f"{platform}: пустой список {field_name}"
        assert config.status_keywords

    def test_currency_fallback_is_last_amount_pattern(self):
        config = ConfigLoader().load("generic")
        assert config.amount[-1].description == "any currency amount"

    def test_platform_specific_order_ids(self):
        assert ConfigLoader().load("flipkart").order_id[0].description == "flipkart order label"
        assert ConfigLoader().load("amazon").order_id[0].description == "amazon order label"
