import hashlib


def compute_resume_hash(content: bytes) -> str:
    """Stable content hash for a submitted resume file."""
    return hashlib.sha256(content).hexdigest()
