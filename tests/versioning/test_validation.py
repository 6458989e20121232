"""Tests for product-name validation, proximity and extraction validation."""

from versioning import calculate_proximity, validate_extraction, validate_product_name

PAGE = "DaVinci Resolve 19.1 release notes. Fusion improvements and bug fixes."


class TestProductName:
    def test_verbatim_case_insensitive(self):
        assert validate_product_name("davinci resolve", PAGE)

    def test_reordered_words(self):
        assert validate_product_name("Resolve DaVinci Studio", "New DaVinci features in Resolve")

    def test_unrelated_page(self):
        assert not validate_product_name("DaVinci Resolve", "Adobe Premiere Pro 25.0 is out")

    def test_exactly_half_is_not_enough(self):
        assert not validate_product_name("DaVinci Resolve Studio Edition", "Resolve news and DaVinci tips")

    def test_short_words_ignored(self):
        assert not validate_product_name("Go UI", "a ui for go")

    def test_empty_inputs(self):
        assert not validate_product_name("", PAGE)
        assert not validate_product_name("Resolve", "")


class TestProximity:
    def test_adjacent(self):
        assert calculate_proximity("DaVinci Resolve", "19.1", PAGE) == 16

    def test_version_missing(self):
        assert calculate_proximity("DaVinci Resolve", "20.0", PAGE) == -1

    def test_falls_back_to_significant_word(self):
        content = "Resolve is great. " + "x" * 10 + " 19.1"
        assert calculate_proximity("DaVinci Resolve", "19.1", content) == content.find("19.1")


class TestValidateExtraction:
    TARGET = {"name": "DaVinci Resolve"}

    def test_no_version_is_valid(self):
        outcome = validate_extraction(self.TARGET, {"current_version": None, "ai_confidence": 40}, PAGE)
        assert outcome.valid
        assert outcome.confidence == 40

    def test_name_missing_is_hard_stop(self):
        extracted = {"current_version": "25.0", "ai_confidence": 99}
        outcome = validate_extraction(self.TARGET, extracted, "Adobe Premiere Pro 25.0")
        assert outcome.valid is False
        assert outcome.confidence == 0
        assert "wrong product" in outcome.reason

    def test_good_extraction(self):
        extracted = {"current_version": "19.1", "ai_confidence": 90}
        outcome = validate_extraction(self.TARGET, extracted, PAGE)
        assert outcome.valid
        assert outcome.confidence == 95
        assert outcome.product_name_found
        assert outcome.proximity == 16

    def test_far_version_invalid(self):
        content = "DaVinci Resolve " + "filler " * 100 + "19.1"
        extracted = {"current_version": "19.1", "ai_confidence": 90}
        outcome = validate_extraction(self.TARGET, extracted, content)
        assert outcome.valid is False
        assert outcome.confidence == 60
        assert outcome.warnings

    def test_model_reported_name_absent_caps(self):
        extracted = {"current_version": "19.1", "ai_confidence": 95, "product_name_found": False}
        outcome = validate_extraction(self.TARGET, extracted, PAGE)
        assert outcome.confidence == 50
        assert outcome.valid is False
