"""Password comparison for console logins."""
from __future__ import annotations

import hmac


def passwords_match(supplied: str, stored: str | None) -> bool:
    """Return ``True`` when ``supplied`` equals the stored password exactly.

    Passwords are kept as plaintext in the ``account`` table. Swapping this
    function for a salted hash check is the only change a hashing scheme needs.
    """

    if stored is None:
        return False
    return hmac.compare_digest(
        supplied.encode("utf-8", "surrogatepass"),
        stored.encode("utf-8", "surrogatepass"),
    )


__all__ = ["passwords_match"]
