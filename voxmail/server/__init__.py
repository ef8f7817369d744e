"""VoxMail REST backend (FastAPI)."""
