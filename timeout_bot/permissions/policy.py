import logging

from ..commands.actions import CONFIG_ACTIONS, ActionKind
from ..core.snapshots import Actor, GuildSnapshot
from ..storage import Configuration

logger = logging.getLogger(__name__)


def is_authorized(
    actor: Actor, guild: GuildSnapshot, config: Configuration, action: ActionKind
) -> bool:
    """Decide whether ``actor`` may invoke ``action`` in ``guild``.

    The guild owner may do everything. Holders of the configured mod role may
    only toggle timeouts; changing the mod role, timeout role or timeout
    channel stays with the owner.
    """
    if actor.id == guild.owner_id:
        logger.debug(f"User {actor.id} is the guild owner - allowing {action.value}")
        return True

    if action in CONFIG_ACTIONS:
        return False

    if action is ActionKind.TOGGLE_TIMEOUT and config.mod_role_id is not None:
        return config.mod_role_id in actor.role_ids

    return False
