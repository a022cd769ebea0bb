from .config import Settings
from .mock import MockResponse
from .resume import ResumeData

__all__ = ["MockResponse", "ResumeData", "Settings"]
