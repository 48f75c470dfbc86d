import json
from models import db
from models.audit_log import AuditLog
from utils.request_info import client_ip, user_agent

def log_event(action: str, account_id=None, entity=None, entity_id=None, metadata=None):
    row = AuditLog(
        account_id=account_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=client_ip(),
        user_agent=user_agent() or None,
        metadata_json=json.dumps(metadata) if metadata else None
    )
    db.session.add(row)
    db.session.commit()
