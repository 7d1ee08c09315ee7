"""lockstep core -- errors, logging, hashing, timestamps, settings and executors.

Architecture::

    errors.py          Structured error hierarchy (LockstepError)
    logging.py         structlog configuration
    hashing.py         SHA-256 file checksums
    timestamps.py      UTC helpers (stdlib-only)
    settings.py        pydantic-settings runtime settings
    connection.py      MigrationExecutor protocol + executor factory
"""
