from toursite.translations.detector import (
    ENGLISH_KEYWORDS,
    INDONESIAN_KEYWORDS,
    KEYWORD_EXCLUSIONS,
    find_wrong_language_words,
    iter_strings,
    keywords_for,
    looks_untranslated,
    scan_fields,
    scan_for_wrong_language,
)


def test_indonesian_words_flag_a_translation() -> None:
    assert scan_for_wrong_language("Tour guide yang berpengalaman", "en")
    assert find_wrong_language_words("Tour guide yang berpengalaman", "en") == [
        "berpengalaman",
        "yang",
    ]


def test_matching_is_whole_word_and_case_insensitive() -> None:
    assert scan_for_wrong_language("DENGAN senang hati", "en")
    # "dan" inside "Sudan" is not a word on its own
    assert not scan_for_wrong_language("Trips to Sudan", "en")


def test_clean_text_is_not_flagged() -> None:
    assert not scan_for_wrong_language("Experienced local guides", "en")
    assert not scan_for_wrong_language("", "en")
    assert not scan_for_wrong_language(None, "en")
    assert not scan_for_wrong_language("   ", "en")


def test_english_words_flag_primary_content() -> None:
    assert scan_for_wrong_language("Paket the best di Bali", "id")
    assert not scan_for_wrong_language("Paket wisata terbaik di Bali", "id")


def test_language_specific_exclusions() -> None:
    # Dutch "dan" means "then"
    assert "dan" not in keywords_for("nl")
    assert not scan_for_wrong_language("Wij gaan dan naar huis", "nl")
    assert scan_for_wrong_language("Wij gaan dan naar huis", "en")


def test_exclusions_name_only_real_keywords() -> None:
    for language, words in KEYWORD_EXCLUSIONS.items():
        keywords = ENGLISH_KEYWORDS if language == "id" else INDONESIAN_KEYWORDS
        assert words <= keywords, language


def test_iter_strings_walks_nested_structures() -> None:
    value = {
        "day": "Hari 1",
        "activities": [{"title": "Snorkeling"}, {"title": "Makan malam"}],
        "count": 3,
    }
    assert list(iter_strings(value)) == ["Hari 1", "Snorkeling", "Makan malam"]


def test_iter_strings_stops_at_max_depth() -> None:
    deep = "tersembunyi"
    for _ in range(10):
        deep = [deep]
    assert list(iter_strings(deep)) == []


def test_scan_fields_reports_flagged_field_names() -> None:
    fields = {
        "title": "Island hopping",
        "description": "Perjalanan dengan kapal",
        "itinerary": [{"title": "Day 1", "activities": ["Visit the pier"]}],
        "highlights": ["Snorkeling", "Sunset untuk semua"],
    }
    assert scan_fields(fields, "en") == ["description", "highlights"]
    assert scan_fields(fields, "en", only=["title"]) == []


def test_looks_untranslated_warnings() -> None:
    assert looks_untranslated("Pantai indah", "Pantai indah", "en") == [
        "identical_to_source"
    ]
    assert looks_untranslated(
        "Wisata alam", "Nature tour dengan guide", "en"
    ) == ["contains_source_language"]
    assert looks_untranslated("Wisata alam", "Nature tour", "en") == []
