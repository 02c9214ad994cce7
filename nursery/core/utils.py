"""Audit trail helpers"""
import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def get_client_ip(request):
    """First address of X-Forwarded-For, else REMOTE_ADDR"""
    meta = getattr(request, 'META', None)
    if not meta:
        return None
    forwarded = meta.get('HTTP_X_FORWARDED_FOR', '')
    ip = forwarded.split(',')[0].strip() if forwarded else meta.get('REMOTE_ADDR')
    return ip or None


def _acting_user(request, user):
    if user is None and request is not None:
        user = getattr(request, 'user', None)
    if user is not None and not user.is_authenticated:
        return None
    return user


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None,
                     org=None):
    """
    Record an action in the audit trail

    Args:
        request: the current request; supplies the user and client IP
        action: one of ``AuditLog.ACTION_CHOICES`` (create, order_status, pick, ...)
        model_name: the model acted upon, e.g. ``'Order'``
        object_id: primary key of the row; stored as a string
        changes: dict describing what changed
        user: acting user when there is no request (management commands, services)
        object_name: human-readable name, e.g. the customer name
        object_reference: business reference, e.g. an order number or bottle code
        org: organisation override; defaults to the acting user's

    Returns the entry, or None when it was skipped or could not be written.
    The operation being audited is never interrupted by this function.
    """
    if not action or not model_name or object_id in (None, ''):
        logger.warning(
            f"Audit log skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    try:
        audit_user = _acting_user(request, user)
        if org is None and audit_user is not None:
            org = getattr(audit_user, 'org', None)
        return AuditLog.objects.create(
            org=org,
            user=audit_user,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=changes or {},
            ip_address=get_client_ip(request),
        )
    except Exception as e:
        logger.error(f"Failed to create audit log for {model_name} {object_id}: {e}")
        return None
