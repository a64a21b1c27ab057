"""Stateful widgets driven by the controller: command palette, date picker, toasts."""
