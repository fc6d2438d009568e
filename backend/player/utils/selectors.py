"""Stable element ids attached to render outcomes."""


def build_folder_button_id(node_id: str) -> str:
    return f"folderButton-{node_id}"


def build_file_id(node_id: str) -> str:
    return f"file-{node_id}"


def build_link_item_id(node_id: str) -> str:
    return f"link-{node_id}"


def build_document_id(node_id: str) -> str:
    return f"document-{node_id}"


def build_app_id(node_id: str) -> str:
    return f"app-{node_id}"


def build_collapsible_id(node_id: str) -> str:
    return f"collapsible-{node_id}"
