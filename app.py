import gradio as gr

from json_record_tools.combine import CONFLICT_RESOLUTIONS, STRATEGIES
from json_record_tools.config import configure_logging, settings
from json_record_tools.handlers_merge import combine_files_handler
from json_record_tools.handlers_single import (
    analyze_upload_handler,
    convert_handler,
    deduplicate_handler,
    export_modified_handler,
    limiter_status_handler,
    postprocess_handler,
    validate_handler,
)
from json_record_tools.tabular import DIALECT_TYPES

configure_logging()

# --- UI Definition ---
with gr.Blocks(title="Artist JSON Tools") as demo:
    gr.Markdown("# Artist JSON Tools")
    gr.Markdown("Inspect, trim, deduplicate, combine and convert enriched artist data exports.")

    # State
    records_state = gr.State()

    with gr.Tab("Modify"):
        with gr.Row():
            # Left Panel: Input & Schema
            with gr.Column(scale=1):
                gr.Markdown("### 1. Import")
                modify_file = gr.File(label="Upload JSON File", file_types=[".json"])
                modify_status = gr.Textbox(label="Status", interactive=False)

                gr.Markdown("### 2. Select Fields")
                field_selector = gr.CheckboxGroup(label="Fields to keep", choices=[], value=[])
                field_tree = gr.JSON(label="Field Tree")

            # Right Panel: Field details & export
            with gr.Column(scale=1):
                gr.Markdown("### 3. Field Details")
                field_table = gr.Dataframe(
                    headers=["Path", "Type", "Sample", "Description"],
                    datatype=["str", "str", "str", "str"],
                    col_count=(4, "fixed"),
                    interactive=False,
                    label="Discovered Fields",
                )

                gr.Markdown("### 4. Export")
                modify_filename = gr.Textbox(label="Output Filename (optional)", placeholder="modified")
                modify_btn = gr.Button("Export Modified JSON", variant="primary")
                modify_download = gr.File(label="Download Result")
                modify_preview = gr.JSON(label="Preview (first 3 rows)")

        modify_file.upload(
            fn=analyze_upload_handler,
            inputs=[modify_file],
            outputs=[records_state, field_selector, field_table, field_tree, modify_status],
        )

        modify_btn.click(
            fn=export_modified_handler,
            inputs=[records_state, field_selector, modify_filename],
            outputs=[modify_download, modify_status, modify_preview],
        )

    with gr.Tab("Deduplicate"):
        dedup_file = gr.File(label="Upload JSON File", file_types=[".json"])
        dedup_filename = gr.Textbox(label="Output Filename (optional)", placeholder="deduplicated")
        dedup_btn = gr.Button("Remove Duplicates", variant="primary")
        dedup_download = gr.File(label="Deduplicated Result")
        dedup_status = gr.Textbox(label="Summary", interactive=False)
        dedup_keys = gr.Textbox(label="Duplicate Keys", interactive=False)

        dedup_btn.click(
            fn=deduplicate_handler,
            inputs=[dedup_file, dedup_filename],
            outputs=[dedup_download, dedup_status, dedup_keys],
        )

    with gr.Tab("Combine"):
        combine_files = gr.File(label="JSON Files", file_types=[".json"], file_count="multiple")
        with gr.Row():
            combine_strategy = gr.Radio(choices=list(STRATEGIES), value="append", label="Merge Strategy")
            combine_conflict = gr.Radio(
                choices=list(CONFLICT_RESOLUTIONS),
                value="keep_first",
                label="Conflict Resolution",
                info="Used by the merge strategy when two records share artistName / id / name.",
            )
        combine_filename = gr.Textbox(label="Combined Output Filename", placeholder="combined.json")
        combine_btn = gr.Button("Combine & Download", variant="primary")
        combine_download = gr.File(label="Combined Result")
        combine_status = gr.Textbox(label="Combine Status", interactive=False)
        combine_preview = gr.JSON(label="Preview (first 3 rows)")

        combine_btn.click(
            fn=combine_files_handler,
            inputs=[combine_files, combine_strategy, combine_conflict, combine_filename],
            outputs=[combine_download, combine_status, combine_preview],
        )

    with gr.Tab("Convert"):
        convert_file = gr.File(label="Upload JSON File", file_types=[".json"])
        with gr.Row():
            convert_format = gr.Radio(choices=["SQL", "CSV", "JSON"], value="SQL", label="Output Format")
            convert_dialect = gr.Dropdown(
                label="SQL Dialect",
                choices=sorted(DIALECT_TYPES),
                value="postgresql",
                interactive=True,
            )
        with gr.Row():
            convert_table = gr.Textbox(label="Table Name", value=settings.sql_table_name)
            convert_batch = gr.Number(label="Batch Size", value=settings.sql_batch_size, precision=0)
        with gr.Row():
            convert_create = gr.Checkbox(label="Include CREATE TABLE", value=True)
            convert_inserts = gr.Checkbox(label="Include INSERT statements", value=True)
        convert_filename = gr.Textbox(label="Output Filename (optional)", placeholder="converted")
        convert_btn = gr.Button("Convert & Download", variant="primary")
        convert_download = gr.File(label="Converted Result")
        convert_status = gr.Textbox(label="Status", interactive=False)
        convert_preview = gr.Code(label="Preview")

        convert_btn.click(
            fn=convert_handler,
            inputs=[
                convert_file,
                convert_format,
                convert_dialect,
                convert_table,
                convert_batch,
                convert_create,
                convert_inserts,
                convert_filename,
            ],
            outputs=[convert_download, convert_status, convert_preview],
        )

    with gr.Tab("Validate"):
        validate_file = gr.File(label="Upload JSON File", file_types=[".json"])
        validate_btn = gr.Button("Validate", variant="primary")
        validate_report = gr.Textbox(label="Report", interactive=False, lines=12)
        validate_summary = gr.JSON(label="Summary")

        validate_btn.click(
            fn=validate_handler,
            inputs=[validate_file],
            outputs=[validate_report, validate_summary],
        )

    with gr.Tab("Post-process"):
        gr.Markdown(
            "Removes artists without music videos, keeps only artistName, musicBrainzArtistID and mvids, "
            "and strips MusicBrainz / TheAudioDB IDs from each video."
        )
        post_file = gr.File(label="Upload JSON File", file_types=[".json"])
        post_filename = gr.Textbox(label="Output Filename (optional)", placeholder="postprocessed")
        post_btn = gr.Button("Run Post-Processing", variant="primary")
        post_download = gr.File(label="Post-processed Result")
        post_status = gr.Textbox(label="Summary", interactive=False)
        post_preview = gr.JSON(label="Preview (first 3 rows)")

        post_btn.click(
            fn=postprocess_handler,
            inputs=[post_file, post_filename],
            outputs=[post_download, post_status, post_preview],
        )

    with gr.Tab("API Limits"):
        limits_table = gr.Dataframe(
            headers=["API", "Max Calls", "Window (ms)", "Queued", "In Window", "Status"],
            col_count=(6, "fixed"),
            interactive=False,
            label="Rate Limiters",
        )
        limits_refresh = gr.Button("Refresh")

        limits_refresh.click(fn=limiter_status_handler, inputs=[], outputs=[limits_table])
        demo.load(fn=limiter_status_handler, inputs=[], outputs=[limits_table])

if __name__ == "__main__":
    demo.launch()
