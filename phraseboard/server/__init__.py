"""Web server: FastAPI app, SQLite store, results pages."""
