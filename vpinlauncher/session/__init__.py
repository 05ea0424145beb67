"""Session lifecycle: emulator launching and the application controller."""
