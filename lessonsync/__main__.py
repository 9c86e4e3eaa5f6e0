"""Allow running LessonSync with ``python -m lessonsync``."""
from lessonsync.cli.main import app

if __name__ == "__main__":
    app()
