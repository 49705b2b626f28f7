"""postsync core: the interface the UI layer calls into.

    from postsync.core import SyncCore
"""

from postsync.core.sync_core import SyncCore
from postsync.core.validation import EDITABLE_FIELDS, MAX_SUMMARY_LENGTH, MAX_TITLE_LENGTH

__all__ = [
    "SyncCore",
    "EDITABLE_FIELDS",
    "MAX_TITLE_LENGTH",
    "MAX_SUMMARY_LENGTH",
]
