"""Shared helpers: audit logging, permissions and query-param parsing"""
import logging
from datetime import datetime
from decimal import Decimal

from .models import AuditLog

logger = logging.getLogger(__name__)

ADMIN_GROUPS = ('Admin', 'ProjectManager')


def get_client_ip(request):
    """Extract client IP address from request"""
    if not request or not hasattr(request, 'META'):
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def is_admin_user(user):
    """Admin or ProjectManager group members, or staff/superusers without a group"""
    if not user or not user.is_authenticated:
        return False
    if user.groups.filter(name__in=ADMIN_GROUPS).exists():
        return True
    return user.is_superuser or user.is_staff


def create_audit_log(request=None, action=None, model_name=None, object_id=None,
                     changes=None, user=None, object_name=None, object_reference=None):
    """
    Create an audit log entry

    Args:
        request: Django request object (for user and IP) - optional if user is provided
        action: Action type (create, update, delete, fund_transfer, etc.)
        model_name: Name of the model being acted upon
        object_id: ID of the object (as string)
        changes: Dictionary of changes made
        user: Optional user override (defaults to request.user if request provided)
        object_name: Human-readable name of the object
        object_reference: Reference identifier (e.g., transfer number)
    """
    if not action or not model_name or not object_id:
        logger.warning(
            f"Audit log creation skipped: missing required fields "
            f"(action={action}, model_name={model_name}, object_id={object_id})"
        )
        return None

    audit_user = user
    if audit_user is None and request is not None and hasattr(request, 'user'):
        audit_user = request.user

    try:
        return AuditLog.objects.create(
            user=audit_user if audit_user and audit_user.is_authenticated else None,
            action=action,
            model_name=model_name,
            object_id=str(object_id),
            object_name=object_name,
            object_reference=object_reference,
            changes=to_json_safe(changes or {}),
            ip_address=get_client_ip(request) if request else None,
        )
    except Exception as e:
        # Audit failures never block the main operation
        logger.error(f"Failed to create audit log: {str(e)}")
        return None


def to_json_safe(value):
    """Convert Decimals/dates nested in dicts and lists to strings"""
    if isinstance(value, dict):
        return {k: to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(v) for v in value]
    if isinstance(value, Decimal):
        return str(value)
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return value


def parse_date(value, default=None):
    """Parse a YYYY-MM-DD query param; returns default when empty or invalid"""
    if not value:
        return default
    if hasattr(value, 'isoformat'):
        return value
    try:
        return datetime.strptime(str(value)[:10], '%Y-%m-%d').date()
    except ValueError:
        return default


def parse_positive_int(value, default, maximum=None):
    """Parse a paging param such as page or limit; raises ValueError below 1"""
    if value in (None, ''):
        return default
    number = int(value)
    if number < 1:
        raise ValueError(f'{value} is not a positive integer')
    if maximum is not None:
        number = min(number, maximum)
    return number


def parse_id_list(value):
    """'1,2, 3' -> [1, 2, 3]; ignores non-numeric parts"""
    if not value:
        return []
    ids = []
    for part in str(value).split(','):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
    return ids


def money(value):
    """Format a Decimal aggregate for JSON responses"""
    if value is None:
        value = Decimal('0.00')
    return str(Decimal(value).quantize(Decimal('0.01')))
