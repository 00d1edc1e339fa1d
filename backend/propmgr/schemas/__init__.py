from propmgr.schemas.init_report import (
    ExecutionOutcome,
    InitReport,
    MigrationStep,
)

__all__ = [
    "ExecutionOutcome",
    "InitReport",
    "MigrationStep",
]
