"""
Common/Shared Fixtures

Base factories and generators used across test layers.
"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def make_client_id() -> str:
    """Generate a unique client ID"""
    return str(uuid.uuid4())


def make_email(prefix: Optional[str] = None) -> str:
    """Generate a unique email"""
    prefix = prefix or f"accounts_{uuid.uuid4().hex[:8]}"
    return f"{prefix}@acmebuild.in"


def make_timestamp() -> str:
    """Generate current UTC timestamp"""
    return datetime.now(timezone.utc).isoformat()
