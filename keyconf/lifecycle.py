"""
Opens a config store when an entity becomes active and saves/closes it when
the entity leaves.

Whatever delivers the events (HTTP routes, a queue consumer, a callback)
just calls ``on_activate`` / ``on_deactivate`` with the entity's stable
identity. Per identity the states are Unregistered -> Registered ->
Unregistered; a repeated activate is a no-op.
"""

import logging
from typing import Generic, Optional

from .registry import ConfigRegistry, K
from .repositories import StoreError, YamlConfigStore

logger = logging.getLogger(__name__)


class LifecycleBinding(Generic[K]):
    """
    Join/leave handling on top of a ConfigRegistry.

    Failures never escape: a store that cannot be opened is logged and the
    identity is left unregistered; a store that cannot be saved on leave is
    logged and still removed. Changes made since the last save are lost if
    the process dies without a leave, so hosts should call
    ``registry.save_all()`` periodically.
    """

    def __init__(self, registry: ConfigRegistry[K], template: Optional[bytes] = None):
        self.registry = registry
        self.template = template

    def on_activate(self, identity: K) -> bool:
        """Register the identity's store. True if a new store was opened."""
        try:
            registered = self.registry.register(identity, str(identity))
            if registered and self.template is not None:
                self._seed(self.registry.get(identity))
        except (StoreError, ValueError) as e:
            logger.error("Could not open config for %s: %s", identity, e, exc_info=True)
            self.registry.deregister(identity)
            return False
        if registered:
            logger.info("Config opened for %s", identity)
        return registered

    def _seed(self, store: Optional[YamlConfigStore]) -> None:
        if store is None or not store.seed_from_template(self.template):
            return
        before = store.as_dict()
        store.merge_defaults(self.registry.defaults)
        if store.as_dict() != before:
            store.save()

    def on_deactivate(self, identity: K) -> bool:
        """Save and deregister the identity's store. True if it was saved."""
        store = self.registry.get(identity)
        if store is None:
            logger.debug("Leave for %s with no open config", identity)
            return False
        try:
            store.save()
        except StoreError as e:
            logger.error("Could not save config for %s: %s", identity, e.message, exc_info=True)
            return False
        else:
            logger.info("Config saved for %s", identity)
            return True
        finally:
            self.registry.deregister(identity)
