"""kanban-tui: keyboard and mouse driven kanban boards for the terminal."""

from kanban_tui.version import get_app_version

__version__ = get_app_version()

__all__ = ["__version__", "get_app_version"]
