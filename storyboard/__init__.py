# Storyboard document model + validation engine
from .ids import IdAllocator, next_id
from .models import Storyboard, StoryboardDoc
from .validator import MalformedStoryboardError, ValidationResult, validate_storyboard

__all__ = [
    "IdAllocator",
    "next_id",
    "Storyboard",
    "StoryboardDoc",
    "MalformedStoryboardError",
    "ValidationResult",
    "validate_storyboard",
]
