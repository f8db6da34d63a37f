from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Optional

from .config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def read_json_content(file_obj):
    """Read JSON content from an uploaded file or file path."""
    if file_obj is None:
        raise ValueError("No file uploaded.")

    if hasattr(file_obj, 'read'):
        if hasattr(file_obj, 'seek'):
            file_obj.seek(0)
        content = file_obj.read()
        if isinstance(content, bytes):
            content = content.decode('utf-8')
        return json.loads(content)

    path = file_obj.name if hasattr(file_obj, 'name') else file_obj
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def is_file_size_acceptable(file_obj, config: Optional[Settings] = None) -> bool:
    config = config or default_settings
    path = file_obj.name if hasattr(file_obj, 'name') else file_obj
    try:
        size = os.path.getsize(path)
    except (OSError, TypeError):
        return True
    return size <= config.max_file_size_bytes


def write_export_file(content: str, file_name: Optional[str], extension: str, default_name: str = 'output') -> str:
    """Write exported text into the temp directory and return its path."""
    if not file_name or not file_name.strip():
        file_name = default_name
    file_name = os.path.basename(file_name.strip())

    ext = f".{extension.lower().lstrip('.')}"
    if not file_name.lower().endswith(ext):
        file_name += ext

    path = os.path.join(tempfile.gettempdir(), file_name)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)
    logger.info("Wrote %d characters to %s", len(content), path)
    return path
