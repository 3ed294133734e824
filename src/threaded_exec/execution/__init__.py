"""
Execution subsystem.

Components:
- models.py: data structures (ExecutionResult, RunOutcome, TaskState)
- runner.py: CommandRunner + per-platform shell backends
- task.py: ExecutionTask, the single-delivery entry point
- scheduler.py: inline / per-thread / pooled schedulers
- api.py: small high-level helpers used by the rest of the app
"""
