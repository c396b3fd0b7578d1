"""
Classification rules for transfer outcomes.
"""


def is_success_status(status: int) -> bool:
    """Any status in 200-399 counts as a completed transfer."""
    return 200 <= status < 400


def progress_percent(loaded: int, total: int) -> int:
    """Rounded percentage of ``loaded`` over ``total``, for display only."""
    if total <= 0:
        return 0
    return min(100, int(round(loaded / total * 100)))


def disconnect_counts_as_success(bytes_sent: int, total: int) -> bool:
    """
    Decide whether a status-less failure still means the upload landed.

    The provider may close the connection right after accepting the final
    byte, before a response is read. Only when every byte of a non-empty
    payload was handed to the transport is the transfer treated as
    successful.
    """
    return total > 0 and bytes_sent >= total
