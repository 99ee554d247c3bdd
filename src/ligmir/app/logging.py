import logging

from ligmir.infrastructure.data_models import (
    Command,
    Malformed,
    SetDefaultCharacter,
    SkillCheck,
)


def log_command(command: Command, logger: logging.Logger) -> None:
    if isinstance(command, SkillCheck):
        reference = command.reference.character_id if command.reference else "default"
        logger.info(f"Skill check requested: {command.skill} (character: {reference})")
        logger.info(f"Source: {command.source}")
    elif isinstance(command, SetDefaultCharacter):
        logger.info(f"Default character requested: {command.reference.character_id}")
        logger.info(f"Source: {command.source}")
    elif isinstance(command, Malformed):
        logger.info(f"Malformed command: {command.error}")
    else:
        logger.debug("Update ignored: not a command")
