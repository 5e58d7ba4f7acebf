"""
End-to-end tests for HTMLAnalysisEngine.parse_html().

Covers the full pipeline (load → validate → extract → analyze), the
uniform error surface, per-call options, configuration and the
engine's counters.
"""

import logging
import threading

import pytest

from html_audit import HTMLAnalysisEngine, EngineConfig, ParseOptions, parse_html
from html_audit.tree import DocumentTree
from html_audit.exceptions import ParseFailure, ValidationError

MINIMAL = "<html><head><title>T</title></head><body><h2>X</h2></body></html>"

FULL_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Widgets</title>
  <meta name="description" content="Everything about widgets.">
  <link rel="stylesheet" href="/site.css">
  <script src="/app.js" defer></script>
</head>
<body>
  <h1>Widgets</h1>
  <h2>Why widgets</h2>
  <p>Widgets make every workshop a little more organised and a lot more fun to work in.</p>
  <img src="a.png" alt="A widget" width="100" height="80">
  <img src="b.png" alt="" width="1" height="1">
  <a href="https://example.com/shop">Shop now</a>
  <footer>Copyright 2024 Widget Co. Contact: hello@example.com</footer>
</body>
</html>"""


@pytest.fixture
def engine():
    return HTMLAnalysisEngine()


def test_end_to_end_minimal_document(engine):
    result = engine.parse_html(MINIMAL)
    data = result.data

    assert "Missing meta description" in data.seo.issues
    assert "Missing page title" not in data.seo.issues
    assert data.seo.score == 100 - 15 * len(data.seo.issues)
    assert data.structure.hierarchy.issues == ["Missing H1 tag"]
    assert data.structure.headings[0].text == "X"


def test_clean_page_scores(engine):
    data = engine.parse_html(FULL_PAGE).data

    assert data.metadata.title == "Widgets"
    assert data.structure.hierarchy.is_valid
    assert data.seo.issues == ["1 images without alt text"]   # the decorative one
    assert data.accessibility.issues == []
    assert data.accessibility.level == "AA"
    assert data.performance.issues == []
    assert data.performance.total_resources == 2 + 1 + 1
    assert data.structure.footer.has_copyright
    assert data.structure.footer.has_contact_info
    assert data.links[0].is_external


def test_result_carries_tree_and_duration(engine):
    result = engine.parse_html(MINIMAL)

    assert result.success
    assert isinstance(result.tree, DocumentTree)
    assert result.tree.find("h2") is not None
    assert result.duration >= 0
    assert "tree" not in result.model_dump()


def test_validation_failure_names_every_missing_element(engine):
    with pytest.raises(ValidationError) as exc_info:
        engine.parse_html("<p>fragment</p>")

    message = exc_info.value.message
    for element in ("<html>", "<head>", "<body>", "<title>"):
        assert f"Missing {element} element" in message


def test_duplicate_id_fails_validation(engine):
    page = (
        "<html><head><title>T</title></head>"
        '<body><p id="dup">a</p><p id="dup">b</p></body></html>'
    )
    with pytest.raises(ValidationError, match="Duplicate ID: dup"):
        engine.parse_html(page)


def test_validation_can_be_disabled_per_call(engine):
    result = engine.parse_html("<p>fragment</p>", {"validateHTML": False})
    assert result.data.content.paragraphs == 1


def test_validation_can_be_disabled_for_the_engine():
    engine = HTMLAnalysisEngine(validate_html=False)
    assert engine.parse_html("<p>fragment</p>").success


def test_parse_failure_is_wrapped(engine):
    with pytest.raises(ValidationError) as exc_info:
        engine.parse_html(None)

    error = exc_info.value
    assert error.message.startswith("HTML parsing failed:")
    assert isinstance(error.__cause__, ParseFailure)
    assert error.violations == []


def test_repeat_runs_produce_identical_reports(engine):
    first = engine.parse_html(FULL_PAGE)
    second = engine.parse_html(FULL_PAGE)
    assert first.data.model_dump() == second.data.model_dump()


def test_current_host_option(engine):
    options = ParseOptions(current_host="example.com")
    result = engine.parse_html(FULL_PAGE, options)
    assert not result.data.links[0].is_external


def test_preserve_whitespace_option(engine):
    page = "<html><head><title>T</title></head><body><h1>A    B</h1></body></html>"
    collapsed = engine.parse_html(page)
    preserved = engine.parse_html(page, {"preserve_whitespace": True})
    assert collapsed.data.structure.headings[0].text == "A B"
    assert preserved.data.structure.headings[0].text == "A    B"


def test_sanitization_warnings_reach_the_report(engine):
    result = engine.parse_html(MINIMAL.replace("<body>", "<body>\x00"))
    assert result.data.warnings == ["Removed NULL bytes"]


def test_module_level_parse_html():
    assert parse_html(MINIMAL).data.metadata.title == "T"


# --- Stats ---

def test_stats_track_successful_runs(engine):
    engine.parse_html(FULL_PAGE)
    engine.parse_html(FULL_PAGE)

    stats = engine.get_parsing_stats()
    assert stats.documents_processed == 2
    assert stats.elements_extracted == 4
    assert stats.errors_found == 0
    assert stats.optimizations_applied == 0


def test_stats_count_validation_failures(engine):
    with pytest.raises(ValidationError):
        engine.parse_html("<p>fragment</p>")

    stats = engine.get_parsing_stats()
    # Four violations plus the failed call
    assert stats.errors_found == 5
    assert stats.documents_processed == 0


def test_stats_count_malformed_structured_data(engine):
    page = MINIMAL.replace(
        "</head>", '<script type="application/ld+json">{broken</script></head>'
    )
    result = engine.parse_html(page)

    assert result.data.metadata.structured_data == []
    assert engine.get_parsing_stats().errors_found == 1


def test_deeply_nested_structured_data_does_not_abort_the_run(engine):
    nested = "[" * 100000 + "]" * 100000
    page = MINIMAL.replace(
        "</head>",
        f'<script type="application/ld+json">{nested}</script>'
        '<script type="application/ld+json">{"a": 1}</script></head>'
    )
    result = engine.parse_html(page)

    assert result.data.metadata.structured_data == [{"a": 1}]
    assert result.data.metadata.structured_data_errors == 1
    assert engine.get_parsing_stats().errors_found == 1


def test_unexpected_failure_is_logged_counted_and_raised(engine, monkeypatch, caplog):
    def broken_extract(tree, current_host=None):
        raise RuntimeError("extractor exploded")

    monkeypatch.setattr(engine.extractor, "extract", broken_extract)
    caplog.set_level(logging.ERROR, logger="html_audit")

    with pytest.raises(RuntimeError, match="extractor exploded"):
        engine.parse_html(MINIMAL)

    assert "parse_html failed after" in caplog.text
    assert "RuntimeError: extractor exploded" in caplog.text
    stats = engine.get_parsing_stats()
    assert stats.errors_found == 1
    assert stats.documents_processed == 0


def test_stats_snapshot_is_a_copy(engine):
    before = engine.get_parsing_stats()
    engine.parse_html(MINIMAL)
    assert before.documents_processed == 0
    assert engine.get_parsing_stats().documents_processed == 1


def test_reset_stats(engine):
    engine.parse_html(FULL_PAGE)
    with pytest.raises(ValidationError):
        engine.parse_html("")

    engine.reset_stats()
    assert engine.get_parsing_stats().model_dump() == {
        "documents_processed": 0,
        "elements_extracted": 0,
        "errors_found": 0,
        "optimizations_applied": 0,
    }


def test_stats_are_thread_safe(engine):
    def worker():
        for _ in range(5):
            engine.parse_html(FULL_PAGE)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    stats = engine.get_parsing_stats()
    assert stats.documents_processed == 40
    assert stats.elements_extracted == 80


def test_stats_never_decrease(engine):
    with pytest.raises(ValueError):
        engine.stats.add_elements(-1)


# --- Configuration ---

def test_config_from_env(monkeypatch):
    monkeypatch.setenv("HTML_AUDIT_VALIDATE_HTML", "false")
    monkeypatch.setenv("HTML_AUDIT_PRESERVE_WHITESPACE", "yes")
    monkeypatch.setenv("HTML_AUDIT_CURRENT_HOST", "example.com")
    monkeypatch.setenv("HTML_AUDIT_LOG_LEVEL", "debug")

    config = EngineConfig.from_env()
    assert config.validate_html is False
    assert config.preserve_whitespace is True
    assert config.current_host == "example.com"
    assert config.log_level == 10


def test_config_from_env_rejects_garbage(monkeypatch):
    monkeypatch.setenv("HTML_AUDIT_XML_MODE", "maybe")
    with pytest.raises(ValueError):
        EngineConfig.from_env()


def test_keyword_overrides_beat_env(monkeypatch):
    monkeypatch.setenv("HTML_AUDIT_VALIDATE_HTML", "false")
    assert EngineConfig.from_env(validate_html=True).validate_html is True


def test_parse_options_accept_camel_case():
    options = ParseOptions.model_validate(
        {"preserveWhitespace": True, "validateHTML": False, "currentHost": "a.example"}
    )
    resolved = options.resolve(EngineConfig())
    assert resolved.preserve_whitespace is True
    assert resolved.validate_html is False
    assert resolved.current_host == "a.example"


def test_unset_options_keep_engine_config():
    config = EngineConfig(validate_html=False, current_host="a.example")
    assert ParseOptions().resolve(config) == config
