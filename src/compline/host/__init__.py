"""
Host module - the editor-facing side: surfaces, timers and notifications.
"""

from compline.host.notify import Notifier
from compline.host.scheduler import AsyncioScheduler, Scheduler
from compline.host.surface import EditorSurface

__all__ = ["EditorSurface", "Scheduler", "AsyncioScheduler", "Notifier"]
