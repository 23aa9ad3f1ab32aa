"""Client-side orchestrator for todo lists stored on an account-based ledger."""

__version__ = "0.1.0"
