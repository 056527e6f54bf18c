from sqlalchemy.orm import Session

from app.models.audit import AuditLog


def audit_event(
    db: Session,
    action: str,
    resource: str,
    user_id: int | None = None,
    resource_id: int | None = None,
    details: str | None = None,
) -> None:
    """Append an audit row. Commits, so call it after the audited change is committed."""
    db.add(
        AuditLog(
            user_id=user_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            details=details,
        )
    )
    db.commit()
