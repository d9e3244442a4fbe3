# Mark services as a package and expose key service modules for tests to monkeypatch.
# Keep this to modules that do not import clinidash.models (models import lab_reference).

from . import gemini as gemini  # noqa: F401
from . import lab_reference as lab_reference  # noqa: F401

__all__ = [
    "gemini",
    "lab_reference",
]
