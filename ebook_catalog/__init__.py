"""Read-only e-book catalog service package."""

from .environment import load_environment

# Load environment variables from .env-style files as soon as the package is
# imported so the CLI and the FastAPI app see the same configuration.
load_environment()

__all__ = ["load_environment"]
