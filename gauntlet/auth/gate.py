"""The static shared-secret session gate.

Candidates present their candidate ID with the one access code every
candidate is given; the admin monitor has its own code. This is a
compatibility gate, not a security boundary.
"""

from __future__ import annotations

import hmac

import pydantic as p

from gauntlet.core import di


class SessionGate(object):
    def __init__(self, access_code: p.Secret[str], admin_code: p.Secret[str]) -> None:
        self._access_code = access_code
        self._admin_code = admin_code

    def check_access_code(self, code: str) -> bool:
        return hmac.compare_digest(code.encode(), self._access_code.get_secret_value().encode())

    def check_admin_code(self, code: str) -> bool:
        return hmac.compare_digest(code.encode(), self._admin_code.get_secret_value().encode())


@di.inject
def check_access_code(code: str, gate: SessionGate = di.Provide["auth.gate"]) -> bool:
    return gate.check_access_code(code)


@di.inject
def check_admin_code(code: str, gate: SessionGate = di.Provide["auth.gate"]) -> bool:
    return gate.check_admin_code(code)
