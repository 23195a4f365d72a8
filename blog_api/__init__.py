"""Blog API: FastAPI backend with role-based access and post approval."""

__version__ = "1.0.0"
