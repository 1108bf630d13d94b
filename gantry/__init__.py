__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'gantry'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .binder import *
from .commands import *
from .converters import *
from .envelope import *
from .faults import *
from .parameters import *
from .parts import *
from .registry import *
from .utils import Unset

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__license__",
    "__version__",
    "version_info",
    "Unset",
)

# Load the exposed API of the parts
__all__ += parts.__all__  # type: ignore[attr-defined]
# Load the exposed API of the converters
__all__ += converters.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the binder
__all__ += binder.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parameters
__all__ += parameters.__all__  # type: ignore[attr-defined]
# Load the exposed API of the envelope
__all__ += envelope.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registry
__all__ += registry.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
