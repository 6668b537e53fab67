"""SugarFunge infrastructure orchestrator for Kubernetes."""

__version__ = "0.1.0"
