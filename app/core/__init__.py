"""Core Business Logic Module

Pure Python identity/profile logic, independent of Flask.

Module Structure:
    - keycloak/         : Keycloak Admin API client and IdP gateway
    - profiles/         : Profile Store records, repository and lifecycle
    - sync/             : Propagation to the IdP and the IdP-side sync handlers
    - registration.py   : Registration saga with compensation
    - roles.py          : Application role vocabulary
    - rbac.py           : Token claims -> ROLE_* authorities
    - errors.py         : Error taxonomy with HTTP statuses
    - audit.py          : Signed JSONL audit trail

Import explicitly when needed:
    from app.core.registration import RegistrationSaga, RegistrationRequest
    from app.core.rbac import map_claims_to_authorities
    from app.core.roles import Role, normalize_and_validate
"""
