"""Audit logging for cross-store identity events (registration, rollback, sync)."""

from __future__ import annotations
import datetime
import hashlib
import hmac
import json
import logging
import os
from pathlib import Path
from typing import Any, Literal

logger = logging.getLogger(__name__)

EventType = Literal[
    "register", "register_rollback", "register_orphaned",
    "sync_update", "sync_delete",
    "profile_update", "profile_delete",
]


def _audit_log_file() -> Path:
    return Path(os.environ.get("AUDIT_LOG_DIR", ".runtime/audit")) / "identity-events.jsonl"


def _get_signing_key() -> bytes:
    """Get the audit signing key from environment or /run/secrets (loaded lazily)."""
    key = os.environ.get("AUDIT_LOG_SIGNING_KEY", "").strip()
    if key:
        return key.encode("utf-8")
    secret_file = Path("/run/secrets") / "audit_log_signing_key"
    if secret_file.is_file():
        try:
            return secret_file.read_text(encoding="utf-8").strip().encode("utf-8")
        except OSError:
            pass
    return b""


def _sign_event(event: dict[str, Any]) -> str:
    """Generate HMAC-SHA256 signature for audit event."""
    signing_key = _get_signing_key()
    if not signing_key:
        return ""
    # Canonical JSON representation for signing
    canonical = json.dumps(event, sort_keys=True, separators=(",", ":"))
    return hmac.new(signing_key, canonical.encode("utf-8"), hashlib.sha256).hexdigest()


def log_event(
    event_type: EventType,
    email: str,
    *,
    operator: str = "system",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    """Append a signed event to the JSONL audit trail.

    Args:
        event_type: Kind of operation
        email: Email of the affected user (correlation key across stores)
        operator: Who performed the operation
        details: Additional context (ids, roles, error text)
        success: Whether the operation succeeded
    """
    log_file = _audit_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        "event_type": event_type,
        "email": email,
        "operator": operator,
        "success": success,
        "details": details or {},
    }

    signature = _sign_event(event)
    if signature:
        event["signature"] = signature

    with log_file.open("a", encoding="utf-8") as f:
        f.write(json.dumps(event, ensure_ascii=False) + "\n")


def safe_log_event(
    event_type: EventType,
    email: str,
    *,
    operator: str = "system",
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> bool:
    """Log an audit event without ever raising.

    Audit failures must not change the outcome of the operation being
    audited, so errors are logged and reported through the return value.

    Returns:
        True if event was logged successfully, False if logging failed
    """
    try:
        log_event(event_type, email, operator=operator, details=details, success=success)
        return True
    except (OSError, TypeError, ValueError) as e:
        logger.warning("Failed to write %s audit event for %s: %s", event_type, email, e)
        return False


def verify_audit_log() -> tuple[int, int]:
    """Verify all signatures in the audit log.

    Returns:
        Tuple of (total_events, valid_signatures)
    """
    log_file = _audit_log_file()
    if not log_file.exists():
        return 0, 0

    total = 0
    valid = 0

    with log_file.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            total += 1
            try:
                event = json.loads(line)
                stored_sig = event.pop("signature", "")
                if not stored_sig:
                    continue
                computed_sig = _sign_event(event)
                if hmac.compare_digest(stored_sig, computed_sig):
                    valid += 1
            except (json.JSONDecodeError, KeyError):
                continue

    return total, valid
