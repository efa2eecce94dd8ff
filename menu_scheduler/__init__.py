"""Menu schedule engine for café menu presets.

Modules:
- config: load and validate configuration (JSON or YAML)
- domain: pydantic models, typed errors, the JSON snapshot store and repositories
- services: conflict detection, recurrence, availability and validation rules
- engine: background tick loop driving the schedule lifecycle
- auth: admin password hashing and default account creation
- io: CSV import/export helpers
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "services",
    "engine",
    "auth",
    "io",
    "cli",
]
