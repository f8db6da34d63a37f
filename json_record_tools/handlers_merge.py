from __future__ import annotations

from uuid import uuid4

from .combine import MERGE, MergeConfiguration, combine_json_files
from .errors import ConfigurationError
from .handlers_single import load_records
from .io_utils import write_export_file
from .tabular import convert_to_json


def combine_files_handler(file_objs, strategy, conflict_resolution, file_name):
    if not file_objs:
        return None, "Upload at least one JSON file.", None
    if not isinstance(file_objs, (list, tuple)):
        file_objs = [file_objs]

    try:
        config = MergeConfiguration(strategy=strategy, conflict_resolution=conflict_resolution)
    except ConfigurationError as exc:
        return None, str(exc), None

    arrays = []
    for idx, file_obj in enumerate(file_objs, start=1):
        records, message = load_records(file_obj)
        if message:
            return None, f"File {idx}: {message}", None
        arrays.append(records)

    combined = combine_json_files(arrays, config)
    input_total = sum(len(a) for a in arrays)

    output_name = (file_name or f"combined_{uuid4().hex}").strip()
    try:
        path = write_export_file(convert_to_json(combined), output_name, 'json')
    except OSError as exc:
        return None, f"Error writing combined file: {str(exc)}", None

    summary = (
        f"Files: {len(arrays)} | Input records: {input_total} | "
        f"Output records: {len(combined)} | Strategy: {config.strategy}"
    )
    if config.strategy == MERGE:
        summary += f" ({config.conflict_resolution})"
    return path, summary, combined[:3]
