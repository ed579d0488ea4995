# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for the storefront tables
# - local_store.py: Per-profile JSON key-value store for drafts
# - whatsapp.py: wa.me deep links for order confirmation
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.local_store import LocalStore
from lib.whatsapp import build_whatsapp_url

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Local storage
    "LocalStore",
    # Messaging
    "build_whatsapp_url",
]
