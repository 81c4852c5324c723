"""Version token computation for stored content."""

import hashlib


def compute_blob_version(content: bytes) -> str:
    """Compute the git blob SHA-1 of content.

    This is the token the GitHub contents API reports as ``sha``, so local
    backends issue tokens indistinguishable from the remote ones.

    Args:
        content: Raw document bytes

    Returns:
        40-character hex digest
    """
    h = hashlib.sha1()
    h.update(b"blob %d\x00" % len(content))
    h.update(content)
    return h.hexdigest()
