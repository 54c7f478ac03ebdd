"""Desktop pygame host."""

from skiracer.simulator.window import SimulatorWindow, WindowConfig, KEY_ACTIONS

__all__ = ["SimulatorWindow", "WindowConfig", "KEY_ACTIONS"]
