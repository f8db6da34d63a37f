from __future__ import annotations

import logging
from typing import Any, List, Tuple

import gradio as gr

from .config import settings
from .dedup import deduplicate_records
from .errors import ConfigurationError
from .io_utils import is_file_size_acceptable, read_json_content, write_export_file
from .postprocess import postprocess_records
from .projection import create_modified_records
from .rate_limiter import build_api_limiters, status_for
from .schema_utils import SchemaSnapshot, analyze_structure, build_tree_from_keys
from .tabular import SQLConversionOptions, convert_to_csv, convert_to_json, convert_to_sql
from .validation import validate_records
from .values import coerce_records

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 2000

api_limiters = build_api_limiters()


def load_records(file_obj) -> Tuple[List[Any], str]:
    """Parse an uploaded file into a record list; the message is empty on success."""
    if file_obj is None:
        return [], "No file uploaded."
    if not is_file_size_acceptable(file_obj):
        return [], f"File is larger than {settings.max_file_size_mb} MB."

    try:
        data = read_json_content(file_obj)
    except Exception as e:
        logger.warning("Could not parse uploaded JSON: %s", e)
        return [], f"Error parsing JSON: {str(e)}"

    records = coerce_records(data)
    if not records:
        return [], "No records found. Expected a JSON array of objects."
    return records, ""


def field_rows(snapshot: SchemaSnapshot) -> List[List[Any]]:
    return [
        [f.key, f.type, str(f.sample_value), f.description]
        for f in snapshot.fields
    ]


def snapshot_summary(snapshot: SchemaSnapshot) -> str:
    types = ", ".join(f"{k}: {v}" for k, v in sorted(snapshot.data_types.items()))
    return (
        f"Records: {snapshot.total_records} | Fields: {len(snapshot.fields)} | "
        f"Size: {snapshot.estimated_size} | Types: {types or 'none'}"
    )


def analyze_upload_handler(file_obj):
    records, message = load_records(file_obj)
    if message:
        return None, gr.update(choices=[], value=[]), [], None, message

    snapshot = analyze_structure(records, sample_size=settings.schema_sample_size)
    keys = snapshot.keys
    tree = build_tree_from_keys(keys)
    return records, gr.update(choices=keys, value=keys), field_rows(snapshot), tree, snapshot_summary(snapshot)


def export_modified_handler(records, selected_keys, file_name):
    if not records:
        return None, "No data loaded.", None
    if not selected_keys:
        return None, "No fields selected.", None

    modified = create_modified_records(records, selected_keys)
    try:
        path = write_export_file(convert_to_json(modified), file_name, 'json', default_name='modified')
    except OSError as e:
        return None, f"Error during export: {str(e)}", None
    return path, f"Exported {len(modified)} records with {len(selected_keys)} selected fields.", modified[:3]


def deduplicate_handler(file_obj, file_name):
    records, message = load_records(file_obj)
    if message:
        return None, message, ""

    outcome = deduplicate_records(records)
    try:
        path = write_export_file(convert_to_json(outcome.deduplicated_data), file_name, 'json', default_name='deduplicated')
    except OSError as e:
        return None, f"Error during export: {str(e)}", ""
    keys_text = ", ".join(outcome.duplicate_keys) if outcome.duplicate_keys else "(none)"
    return path, outcome.summary(), f"Likely identifying fields: {keys_text}"


def convert_handler(file_obj, output_format, database, table_name, batch_size, include_create_table, include_inserts, file_name):
    records, message = load_records(file_obj)
    if message:
        return None, message, ""

    output_format = (output_format or "JSON").upper()
    try:
        if output_format == "SQL":
            options = SQLConversionOptions(
                database=database,
                table_name=table_name or settings.sql_table_name,
                include_create_table=bool(include_create_table),
                include_inserts=bool(include_inserts),
                batch_size=int(batch_size or settings.sql_batch_size),
            )
            content = convert_to_sql(records, options)
        elif output_format == "CSV":
            content = convert_to_csv(records)
        else:
            content = convert_to_json(records)
    except (ConfigurationError, ValueError) as e:
        return None, f"Invalid conversion options: {str(e)}", ""

    try:
        path = write_export_file(content, file_name, output_format.lower(), default_name='converted')
    except OSError as e:
        return None, f"Error during export: {str(e)}", ""
    return path, f"Converted {len(records)} records to {output_format}.", content[:PREVIEW_CHARS]


def validate_handler(file_obj):
    records, message = load_records(file_obj)
    if message:
        return message, None

    result = validate_records(records)
    lines = ["Valid" if result.is_valid else "Invalid"]
    lines.extend(f"Error: {e}" for e in result.errors)
    lines.extend(f"Warning: {w}" for w in result.warnings)
    return "\n".join(lines), result.summary


def postprocess_handler(file_obj, file_name):
    records, message = load_records(file_obj)
    if message:
        return None, message, None

    outcome = postprocess_records(records)
    try:
        path = write_export_file(convert_to_json(outcome.processed_data), file_name, 'json', default_name='postprocessed')
    except OSError as e:
        return None, f"Error during export: {str(e)}", None
    return path, outcome.summary(), outcome.processed_data[:3]


def limiter_status_handler(limiters=None):
    """Rows for the read-only API limits panel."""
    limiters = api_limiters if limiters is None else limiters
    return [
        [name, limiter.max_calls, limiter.window_ms, limiter.queue_length, limiter.current_calls, status_for(limiter)]
        for name, limiter in limiters.items()
    ]
