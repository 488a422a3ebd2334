"""
Unit tests for pipeline wiring and the command-line interface.
"""

import json
import threading

from text_annotator.annotation.factory import (
    build_annotation_pipeline,
    build_ner_providers,
    build_preferences,
)
from text_annotator.annotation.ner.preferences import NerProviderPreferences
from text_annotator.annotation.ner.tiered_source import TieredNerAnnotationSource
from text_annotator.cli.annotate import annotate_messages, main, read_messages

from tests.fixtures.sources import SAMPLE_MESSAGES, FakeNerProvider, person


class TestFactory:
    def test_provider_order(self, mock_settings):
        providers = build_ner_providers(mock_settings)

        assert [p.provider_id for p in providers] == ["spacy_local", "ollama_local", "cloud"]
        assert providers[2].is_available() is False

    def test_pipeline_sources(self, mock_settings):
        mock_settings.annotation_cache_size = 16
        pipeline = build_annotation_pipeline(mock_settings, providers=[])

        assert [s.source_id for s in pipeline.sources] == ["regex_entity", "tiered_ner"]
        assert pipeline.cache_size == 16

    def test_shared_preferences(self, mock_settings):
        preferences = NerProviderPreferences("off")
        pipeline = build_annotation_pipeline(mock_settings, preferences, providers=[])

        tiered = pipeline.sources[1]
        assert isinstance(tiered, TieredNerAnnotationSource)
        assert tiered.preferences is preferences

    def test_preferences_from_settings(self, mock_settings, tmp_path):
        mock_settings.ner_provider_mode = "cloud"
        mock_settings.ner_preferences_path = str(tmp_path / "ner.json")

        preferences = build_preferences(mock_settings)

        assert preferences.selected_provider == "cloud"

    def test_pipeline_with_fake_provider(self, mock_settings):
        text = SAMPLE_MESSAGES["named"]
        provider = FakeNerProvider("spacy_local", [person("Ada Lovelace", text.index("Ada"))])
        pipeline = build_annotation_pipeline(
            mock_settings, NerProviderPreferences(), providers=[provider]
        )

        [annotation] = pipeline.annotate(text)

        assert annotation.source == "spacy_local"


class TestCli:
    def test_read_messages(self, tmp_path):
        path = tmp_path / "messages.txt"
        path.write_text("first line\n\nsecond line\n", encoding="utf-8")

        assert read_messages(["arg"], path) == ["arg", "first line", "second line"]

    def test_annotate_messages_progressive(self, mock_settings):
        text = SAMPLE_MESSAGES["named"]
        provider = FakeNerProvider("spacy_local", [person("Ada", text.index("Ada"))])
        pipeline = build_annotation_pipeline(
            mock_settings, NerProviderPreferences(), providers=[provider]
        )

        records = list(annotate_messages(pipeline, [text], progressive=True))

        assert [r["phase"] for r in records] == [1, 2]
        assert records[0]["annotations"] == []
        assert records[1]["annotations"][0]["type"] == "PERSON_NAME"

    def test_main_writes_jsonl(self, tmp_path):
        output = tmp_path / "out.jsonl"

        exit_code = main(
            [
                SAMPLE_MESSAGES["mixed"],
                SAMPLE_MESSAGES["plain"],
                "--mode",
                "off",
                "--sources",
                "regex_entity",
                "--output",
                str(output),
            ]
        )

        assert exit_code == 0
        records = [json.loads(line) for line in output.read_text(encoding="utf-8").splitlines()]
        assert [r["index"] for r in records] == [0, 1]
        assert [a["type"] for a in records[0]["annotations"]] == [
            "PHONE_NUMBER",
            "EMAIL",
            "DATE_TIME",
        ]
        assert records[1]["annotations"] == []

    def test_main_without_input(self, capsys):
        assert main([]) == 2
        assert "No input messages" in capsys.readouterr().err


class TestModeChangeClearsCache:
    def test_cache_cleared_when_mode_changes(self, mock_settings):
        text = SAMPLE_MESSAGES["named"]
        provider = FakeNerProvider("spacy_local", [person("Ada", text.index("Ada"))])
        preferences = NerProviderPreferences()
        pipeline = build_annotation_pipeline(mock_settings, preferences, providers=[provider])

        assert len(pipeline.annotate(text)) == 1

        preferences.set_selected_provider("off")

        assert pipeline.cache_entries == 0
        assert pipeline.annotate(text) == []

    def test_in_flight_result_not_cached_after_mode_change(self, mock_settings):
        text = SAMPLE_MESSAGES["named"]

        class SlowProvider(FakeNerProvider):
            def __init__(self):
                super().__init__("spacy_local", [person("Ada", text.index("Ada"))])
                self.started = threading.Event()
                self.release = threading.Event()

            def extract_entities(self, text):
                self.started.set()
                self.release.wait(timeout=5)
                return super().extract_entities(text)

        provider = SlowProvider()
        preferences = NerProviderPreferences()
        pipeline = build_annotation_pipeline(mock_settings, preferences, providers=[provider])
        results = {}

        worker = threading.Thread(target=lambda: results.update(auto=pipeline.annotate(text)))
        worker.start()
        try:
            assert provider.started.wait(timeout=5)
            preferences.set_selected_provider("off")
        finally:
            provider.release.set()
            worker.join(timeout=5)

        assert len(results["auto"]) == 1
        assert pipeline.annotate(text) == []
        assert provider.extract_calls == 1
