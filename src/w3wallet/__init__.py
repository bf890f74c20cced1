# mypy: disable-error-code="no-redef"
# seems like mypy doesn't respect __all__
from .exceptions import *  # noqa: F403
from .token import *  # noqa: F403
from .chain import *  # noqa: F403
from .wallets import *  # noqa: F403
from .session import *  # noqa: F403
from .network import *  # noqa: F403
from .outcome import *  # noqa: F403
from .recovery import *  # noqa: F403
from .signing import *  # noqa: F403
from .storage import *  # noqa: F403
from .device import *  # noqa: F403
from .account import *  # noqa: F403
from .config import *  # noqa: F403
from .client import *  # noqa: F403

__version__ = "0.1.0"
