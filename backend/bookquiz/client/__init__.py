"""Headless quiz session client: the browser's lifecycle rules, driven from Python."""
from .api import QuizApiClient
from .autosave import Autosaver
from .lifecycle import QuizLifecycle
from .speech import SpeechCapture, SpeechEngine
from .state import Phase, SavedQuiz, SessionState
from .storage import ANSWERS_KEY, CONFIG_KEY, QUIZ_KEY, LocalStore

__all__ = [
	"ANSWERS_KEY",
	"Autosaver",
	"CONFIG_KEY",
	"LocalStore",
	"Phase",
	"QUIZ_KEY",
	"QuizApiClient",
	"QuizLifecycle",
	"SavedQuiz",
	"SessionState",
	"SpeechCapture",
	"SpeechEngine",
]
