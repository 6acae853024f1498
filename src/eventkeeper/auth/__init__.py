"""Authentication and authorization.

Learn: Users register with username/email/password and log in to get a
signed bearer token (JWT). Each request then goes through two stages:

1. Authentication (fail-open) — the bearer token is resolved to an
   AuthenticatedPrincipal, or to nothing. Never aborts the request.
2. Authorization — OwnershipGuard decides Not-Found / Forbidden / Allowed
   for the requested record, existence first.
"""
