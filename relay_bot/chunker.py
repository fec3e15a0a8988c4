"""
Split long answers into transport-sized messages.
"""

from typing import List

# Maximum characters per outbound message
DEFAULT_CHUNK_SIZE = 2000


def split_message(text: str, max_size: int = DEFAULT_CHUNK_SIZE) -> List[str]:
    """
    Split text into ordered chunks no longer than max_size.

    Slices on code points, so multi-byte characters are never cut apart.
    Joining the result reproduces the input exactly.

    Args:
        text: Text to split
        max_size: Maximum chunk length in characters (must be positive)

    Returns:
        List of chunks (empty for empty text)

    Raises:
        ValueError: If max_size is not positive
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")

    return [text[i : i + max_size] for i in range(0, len(text), max_size)]
