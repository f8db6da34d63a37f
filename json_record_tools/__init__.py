"""Core logic for the artist JSON tools.

The Gradio UI lives in `app.py`. This package contains:
- a sliding-window rate limiter for the external API calls
- schema discovery and field projection over JSON records
- deduplication, multi-file combining and validation
- SQL / CSV / JSON rendering
"""
