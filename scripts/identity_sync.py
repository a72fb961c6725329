"""Command-line helpers for registration and IdP/Profile Store synchronization.

This module is a CLI wrapper around app.core services. It reads the same
environment/secrets as the web service (see app/config/settings.py).
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.config import load_settings
from app.core import audit
from app.core.errors import IdentityError
from app.core.keycloak import KeycloakError
from app.core.registration import RegistrationRequest
from app.core.sync import SyncPropagator


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Identity sync helper")
    sub = parser.add_subparsers(dest="cmd")

    sr = sub.add_parser("register", help="Run the registration saga")
    sr.add_argument("--email", required=True)
    sr.add_argument("--password", required=True)
    sr.add_argument("--first", default="")
    sr.add_argument("--last", default="")
    sr.add_argument("--role", required=True)

    su = sub.add_parser("sync-update", help="Apply an update to the IdP user directly")
    su.add_argument("--email", required=True, help="Current email of the IdP user")
    su.add_argument("--first")
    su.add_argument("--last")
    su.add_argument("--new-email")
    su.add_argument("--role")

    sd = sub.add_parser("sync-delete", help="Delete the IdP user directly")
    sd.add_argument("--email", required=True)

    pd = sub.add_parser("propagate-delete", help="Send a delete through the sync service")
    pd.add_argument("--email", required=True)

    sub.add_parser("verify-audit", help="Verify audit log signatures")

    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if args.cmd == "verify-audit":
        total, valid = audit.verify_audit_log()
        print(f"Audit log: {valid}/{total} events with valid signatures")
        return 0 if total == valid else 1

    cfg = load_settings()

    if args.cmd == "propagate-delete":
        if not cfg.propagation_configured:
            print("[propagate] SYNC_SERVICE_URL/SYNC_SERVICE_SECRET not set; nothing sent", file=sys.stderr)
            return 1
        accepted = SyncPropagator(cfg).propagate_delete(args.email)
        print(f"[propagate] delete {'accepted' if accepted else 'failed'} for {args.email}")
        return 0 if accepted else 1

    from app.flask_app import build_services
    services = build_services(cfg)

    try:
        if args.cmd == "register":
            user_id = services.saga.register_or_raise(RegistrationRequest(
                email=args.email,
                password=args.password,
                first_name=args.first,
                last_name=args.last,
                role=args.role,
            ))
            print(user_id)
        elif args.cmd == "sync-update":
            found = services.identity_sync.update_user_by_email(
                args.email, args.first, args.last, args.new_email, args.role
            )
            print(f"[sync-update] {'updated' if found else 'no user found for'} {args.email}")
        elif args.cmd == "sync-delete":
            found = services.identity_sync.delete_user_by_email(args.email)
            print(f"[sync-delete] {'deleted' if found else 'no user found for'} {args.email}")
    except (IdentityError, KeycloakError) as e:
        print(f"[{args.cmd}] Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
