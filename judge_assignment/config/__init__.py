from judge_assignment.config.settings import settings, Settings

__all__ = ["settings", "Settings"]
