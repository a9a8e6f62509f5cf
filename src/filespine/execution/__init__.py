"""Execution: the per-file wrapper, worker pools and batch orchestration.

Submodules are imported directly (``filespine.execution.batch``); handlers
depend on ``operations`` while ``batch`` depends on handlers, so this
package does not import them eagerly.
"""
