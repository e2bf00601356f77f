"""
shouldkit macros.

Example groups for models, controllers and views, and the pytest hand-off.
"""

from shouldkit.macros.base import MacroGroup
from shouldkit.macros.controllers import ActionResult, ControllerMacros
from shouldkit.macros.models import ModelMacros, pretty_error_messages
from shouldkit.macros.views import ViewMacros

__all__ = [
    "ActionResult",
    "ControllerMacros",
    "MacroGroup",
    "ModelMacros",
    "ViewMacros",
    "pretty_error_messages",
]
