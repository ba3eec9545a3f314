"""
Skeleton Backend - Application Package
======================================

What: Minimal HTTP backend exposing a root route and a health check.
Who:  Imported by uvicorn (`skeleton.main:app`), the CLI entry point and pytest.

Layout:
    ┌─────────────────────────────────────┐
    │   server.py   (listener lifecycle)  │  ← start() / stop() / run()
    ├─────────────────────────────────────┤
    │   main.py     (application factory)│  ← middleware + routes as data
    ├─────────────────────────────────────┤
    │   middleware/ · routes/ · schemas/  │  ← per-request behaviour
    ├─────────────────────────────────────┤
    │   config.py · exceptions.py         │  ← settings and error types
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
