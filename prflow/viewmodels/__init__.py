"""ViewModel package for UI state and command surfaces.

Call context:
    ``prflow/app/controller.py`` builds concrete viewmodels from this package
    and ``prflow/app/main.py`` binds console callbacks to them.

Dependencies:
    Modules in this package depend on domain types, use cases, and the
    coordination context only. Adapters stay outside.

Responsibilities:
    - Expose mutable UI state and command intent methods.
    - Recompute validation and busy flags from immutable state snapshots.
    - Keep MVVM boundaries explicit by avoiding transport or persistence logic.
"""
