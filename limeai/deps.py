from limeai.config import settings
from limeai.infra.admission import AdmissionConfig, AdmissionController
from limeai.infra.result_cache import ResultCache
from limeai.infra.upstream import DeepSeekClient, GeminiClient, PlayDialogClient

# Process-wide instances. One admission quota is shared by every DeepSeek-backed
# endpoint; the result cache is used by flowchart generation only.
_admission = AdmissionController(
    AdmissionConfig(
        limit_per_window=settings.ADMISSION_LIMIT_PER_WINDOW,
        window_seconds=settings.ADMISSION_WINDOW_SECONDS,
        initial_cooldown_seconds=settings.ADMISSION_COOLDOWN_SECONDS,
        max_cooldown_seconds=settings.ADMISSION_MAX_COOLDOWN_SECONDS,
    )
)
_flowchart_cache = ResultCache(max_entries=settings.FLOWCHART_CACHE_MAX_ENTRIES)
_deepseek = DeepSeekClient()
_gemini = GeminiClient()
_playdialog = PlayDialogClient()


def get_admission() -> AdmissionController:
    return _admission


def get_flowchart_cache() -> ResultCache:
    return _flowchart_cache


def get_deepseek() -> DeepSeekClient:
    return _deepseek


def get_gemini() -> GeminiClient:
    return _gemini


def get_playdialog() -> PlayDialogClient:
    return _playdialog
