"""Tests for prompt construction and response decoding."""

import pytest

from app.schemas.ocr import FigureLanguage, OCRMode
from app.services.prompts import MODE_CONFIGS, build_prompt, decode_response, get_mode_config


class TestModeConfig:
    def test_every_mode_has_a_config(self):
        assert set(MODE_CONFIGS) == set(OCRMode)

    @pytest.mark.parametrize(
        "mode, model, penalty",
        [
            (OCRMode.V1_5, "typhoon-ocr", 1.1),
            (OCRMode.DEFAULT, "typhoon-ocr-preview", 1.2),
            (OCRMode.STRUCTURE, "typhoon-ocr-preview", 1.2),
        ],
    )
    def test_model_and_penalty_lookup(self, mode, model, penalty):
        config = get_mode_config(mode)
        assert config.model == model
        assert config.repetition_penalty == penalty

    def test_accepts_plain_string_mode(self):
        assert get_mode_config("structure").model == "typhoon-ocr-preview"

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError):
            get_mode_config("v2")


class TestBuildPrompt:
    def test_v1_5_prompt_substitutes_language(self):
        thai = build_prompt(OCRMode.V1_5, FigureLanguage.THAI)
        english = build_prompt(OCRMode.V1_5, FigureLanguage.ENGLISH)

        assert "Describe in Thai." in thai
        assert "Describe in English." in english
        assert "{language}" not in thai

    def test_v1_5_prompt_formatting_rules(self):
        prompt = build_prompt(OCRMode.V1_5)
        assert "<table>...</table>" in prompt
        assert "($...$)" in prompt and "($$...$$)" in prompt
        assert "<figure>" in prompt
        assert "<page_number>...</page_number>" in prompt
        assert "☐" in prompt and "☑" in prompt
        assert "JSON" not in prompt

    @pytest.mark.parametrize("mode", [OCRMode.DEFAULT, OCRMode.STRUCTURE])
    def test_json_modes_request_natural_text(self, mode):
        prompt = build_prompt(mode, FigureLanguage.ENGLISH)
        assert '"natural_text"' in prompt
        assert build_prompt(mode, FigureLanguage.THAI) == prompt

    def test_structure_prompt_asks_for_html_tables_and_figures(self):
        prompt = build_prompt(OCRMode.STRUCTURE)
        assert "HTML format" in prompt
        assert "<figure>IMAGE_ANALYSIS</figure>" in prompt


class TestDecodeResponse:
    def test_v1_5_is_pass_through(self):
        raw = '# หัวข้อ\n\n<table><tr><td>1</td></tr></table>\n{"natural_text": "x"}'
        assert decode_response(raw, OCRMode.V1_5) == raw

    def test_default_unwraps_natural_text(self):
        assert decode_response('{"natural_text":"hello"}', OCRMode.DEFAULT) == "hello"

    def test_structure_unwraps_natural_text(self):
        raw = '{"natural_text": "<table><tr><td>ไทย</td></tr></table>"}'
        assert decode_response(raw, OCRMode.STRUCTURE) == "<table><tr><td>ไทย</td></tr></table>"

    def test_malformed_json_falls_back_to_raw(self):
        assert decode_response("not-json", OCRMode.DEFAULT) == "not-json"

    @pytest.mark.parametrize(
        "raw",
        ['{"natural_text": ""}', '{"other": "value"}', '["natural_text"]', '"just a string"'],
    )
    def test_json_without_usable_field_falls_back_to_raw(self, raw):
        assert decode_response(raw, OCRMode.DEFAULT) == raw
