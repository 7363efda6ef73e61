from toursite.translations.coverage import check_all_coverage, check_type_coverage
from toursite.translations.detector import (
    find_wrong_language_words,
    looks_untranslated,
    scan_fields,
    scan_for_wrong_language,
)
from toursite.translations.models import (
    ContentTranslation,
    CorruptedTranslation,
    RepairReport,
    TranslatedContent,
)
from toursite.translations.provider import (
    DeepLProvider,
    TranslationProvider,
    get_translation_provider,
)
from toursite.translations.repair import (
    RepairMode,
    fix_source_content,
    repair_translations,
    scan_source_content,
    scan_translations,
)
from toursite.translations.resolver import TranslationResolver
from toursite.translations.service import check_translation_status, trigger_translation
from toursite.translations.store import (
    delete_translations,
    get_translation,
    upsert_translation,
)

__all__ = [
    # Models
    "ContentTranslation",
    "CorruptedTranslation",
    "RepairReport",
    "TranslatedContent",
    # Provider
    "DeepLProvider",
    "TranslationProvider",
    "get_translation_provider",
    # Resolver and store
    "TranslationResolver",
    "delete_translations",
    "get_translation",
    "upsert_translation",
    # Detection and repair
    "RepairMode",
    "check_all_coverage",
    "check_type_coverage",
    "find_wrong_language_words",
    "fix_source_content",
    "looks_untranslated",
    "repair_translations",
    "scan_fields",
    "scan_for_wrong_language",
    "scan_source_content",
    "scan_translations",
    # Service
    "check_translation_status",
    "trigger_translation",
]
