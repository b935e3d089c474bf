"""Photo Studio — FastAPI REST API layer.

This package contains the FastAPI application, Pydantic request/response
models, and the prompt compilation logic.

Modules
-------
main
    FastAPI application with all route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response validation.
prompt_builder
    Multi-character prompt compilation.
references
    Ordered reference image collection.
edit_prompts
    Instruction builders for the appearance, clothing and retouch editors.
history_store
    Bounded, most-recent-first generation history.
"""
