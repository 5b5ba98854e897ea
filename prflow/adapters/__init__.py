"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations for domain ports (GitHub REST, local git
    working copy, settings persistence, and an offline mock) used by use cases.

Dependencies:
    Individual submodules depend on ``requests``, the ``git`` executable,
    filesystem APIs, and domain protocol definitions.

Call context:
    Imported by app composition modules (for runtime wiring) and by tests (for
    mocks and transport-level behavior verification).
"""
