# Authentication module.
# Wraps Supabase email/password auth; the resulting session's user id is the
# only identity the portfolio gateway trusts.

from .session import AuthError, Session, SupabaseAuth

__all__ = ["AuthError", "Session", "SupabaseAuth"]
