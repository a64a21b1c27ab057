"""Pure interaction core: model, history, keybindings and UI state."""
