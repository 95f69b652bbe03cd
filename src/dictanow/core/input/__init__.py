"""Global hotkeys and the shortcut-to-command mapping."""
