"""Test helpers package."""

from tests.helpers.driving import drain, press, ready, type_text
from tests.helpers.wait import wait_until

__all__ = ["drain", "press", "ready", "type_text", "wait_until"]
