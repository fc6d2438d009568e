"""Client-side route paths referenced by render outcomes."""

from urllib.parse import quote


def build_main_path(root_id: str) -> str:
    """Page that displays ``root_id`` as the current root."""
    return f"/{quote(root_id, safe='')}"
