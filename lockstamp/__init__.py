from lockstamp.error import Error  # noqa: F401

# Part of the public API, and must be *after* Error is defined
from lockstamp.hooks import HOOKS, MODIFIED_DEPENDENCIES, pre_commit  # noqa: F401, E402
from lockstamp.patcher import VersionPatcher  # noqa: F401, E402
