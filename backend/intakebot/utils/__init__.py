from intakebot.utils.logger import log

__all__ = ["log"]
