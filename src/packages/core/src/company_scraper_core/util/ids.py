"""ID generation utilities."""
import uuid


def generate_id() -> str:
    """Generate a unique ID for jobs and items."""
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Short ID used to correlate the log lines of one task run."""
    return uuid.uuid4().hex[:12]
