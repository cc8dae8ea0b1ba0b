from .main_menu import build_welcome_keyboard

__all__ = ["build_welcome_keyboard"]
