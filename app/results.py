# app/results.py
# Role: Result types returned by form actions.
#       Validation problems and infrastructure problems are separate types;
#       success either redirects or carries a message.

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ValidationFailed:
    """Form input rejected; `errors` is keyed by form field name."""

    errors: Dict[str, List[str]] = field(default_factory=dict)
    message: str = ""


@dataclass
class DatabaseFailure:
    message: str


@dataclass
class Redirect:
    url: str


@dataclass
class ActionMessage:
    message: str
