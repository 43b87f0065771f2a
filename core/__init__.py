# Core package - foundational components
#
# Modules:
# - config: Application settings
# - logging: Structured logging
# - database: SQLite engine management
# - storage: Pluggable storage backends (SQLite, in-memory)
