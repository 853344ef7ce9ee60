"""uainfo - user agent classification.

Combines a signature database, hand written override rules, ua-parser
and rule based mobile detection into one cached classification.

Example:
    from uainfo import create_default_engine

    engine = create_default_engine()
    info = engine.classify(user_agent)
    if info.is_bot:
        ...
"""

from .classification.engine import ClassificationEngine, create_default_engine
from .core.models import Classification, IdentificationLevel, MobileGrade

__version__ = "0.1.0"

__all__ = [
    "ClassificationEngine",
    "create_default_engine",
    "Classification",
    "IdentificationLevel",
    "MobileGrade",
    "__version__",
]
