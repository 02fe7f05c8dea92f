from backoffice.services.records import AuditEntry


def log_event(
    store,
    username: str | None,
    action: str,
    entity_type: str,
    entity_id: int | None = None,
    details: dict | None = None,
):
    row = AuditEntry(
        username=username,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
    )
    return store.put("audit_log", row)
