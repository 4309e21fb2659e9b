__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'arbor'
__license__ = 'MIT'
# Kept in step with pyproject.toml.
__version__ = "0.0.0"

from . import arguments, commands, faults, help, parser
from .arguments import *
from .commands import *
from .faults import *
from .help import *
from .parser import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

version_info = VersionInfo(*map(int, __version__.split(".")), "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__license__",
    "__version__",
    "version_info"
)

# Re-export the public API of every submodule
for module in (arguments, commands, faults, help, parser):
    __all__ += module.__all__
del module
