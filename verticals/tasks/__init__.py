"""Task vertical: task lifecycle and per-user workload analytics.

Brings the patterns together in one domain:
- SQLAlchemy models for users, tasks and task memberships
- Async repositories with atomic counter increments
- Capability-table authorization built on the rules engine
- Incremental analytics aggregation with a reconcile job
- Calendar window filter with an explicit clock
- FastAPI router over the lifecycle service
"""
