"""
Core parsing components.

This package contains the parsing pipeline, leaf-first:
- Error types
- Entry field store with typed access
- Format template compiler
- Streaming reader
- nginx configuration extraction
"""
