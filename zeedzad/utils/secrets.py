"""Helpers for keeping credentials out of logs."""


def mask_secret(secret: str, visible_chars: int = 4) -> str:
    """Mask a secret for logging purposes.

    Args:
        secret: Secret to mask
        visible_chars: Number of characters to show at start and end

    Returns:
        Masked secret like "abcd...wxyz", or "(unset)" for an empty value
    """
    if not secret:
        return "(unset)"
    if len(secret) <= visible_chars * 2:
        return "*" * len(secret)
    return f"{secret[:visible_chars]}...{secret[-visible_chars:]}"
