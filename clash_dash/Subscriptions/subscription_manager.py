# subscription_manager.py
# Description: Fetch / edit / commit cycle for OpenClash config subscriptions
#
# An edit is a new record compared with the last fetched one:
#   diff -> one `&&`-joined exec -> `uci commit` -> refetch
# The local list is only replaced after both the mutation and the commit
# succeeded. Edits of the same record id run one at a time.
#
# Imports
import asyncio
from typing import TYPE_CHECKING, Dict, List, Optional
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from ..luci_api.exceptions import LuCIAPIError
from .diff_engine import build_batch_command, build_commit_command, diff_subscriptions, has_changes, render_command, Command
from .dump_parser import parse_subscription_dump, parse_template_listing
from .models import SubscriptionField, SubscriptionRecord, encode_flag

if TYPE_CHECKING:
    from ..luci_api.client import LuCIRPCClient
#
########################################################################################################################
#
# Classes

logger = logger.bind(module="subscription_manager")


def describe_subscription(record: SubscriptionRecord) -> List[str]:
    """Human readable summary of a record, one line per attribute."""
    lines = [
        f"- name: {record.name}",
        f"- address: {record.address}",
        f"- enabled: {record.enabled}",
        f"- user agent: {record.sub_ua}",
        f"- subscription conversion: {record.sub_convert}",
    ]
    if record.sub_convert:
        lines.extend([
            f"  - convert address: {record.convert_address or 'none'}",
            f"  - template: {record.template or 'none'}",
            f"  - emoji: {bool(record.emoji)}",
            f"  - udp: {bool(record.udp)}",
            f"  - skip cert verify: {bool(record.skip_cert_verify)}",
            f"  - sort: {bool(record.sort)}",
            f"  - node type: {bool(record.node_type)}",
            f"  - rule provider: {bool(record.rule_provider)}",
            f"  - custom params: {record.custom_params or []}",
        ])
    lines.append(f"- keywords: {record.keyword or 'none'}")
    lines.append(f"- excluded keywords: {record.ex_keyword or 'none'}")
    return lines


class SubscriptionManager:
    """Keeps the last fetched subscriptions and applies edits to the router."""

    def __init__(self, client: "LuCIRPCClient"):
        self.client = client
        self.subscriptions: List[SubscriptionRecord] = []
        self.template_options: List[str] = []
        self._edit_locks: Dict[int, asyncio.Lock] = {}

    def get_subscription(self, record_id: int) -> Optional[SubscriptionRecord]:
        for record in self.subscriptions:
            if record.id == record_id:
                return record
        return None

    def _require(self, record_id: int) -> SubscriptionRecord:
        record = self.get_subscription(record_id)
        if record is None:
            raise KeyError(f"Unknown subscription id: {record_id}")
        return record

    def _lock_for(self, record_id: int) -> asyncio.Lock:
        # Only ids present in the last fetch get a lock
        self._require(record_id)
        lock = self._edit_locks.get(record_id)
        if lock is None:
            lock = self._edit_locks[record_id] = asyncio.Lock()
        return lock

    async def load_subscriptions(self) -> List[SubscriptionRecord]:
        """Fetches and parses the subscriptions, replacing the local list."""
        logger.info("Loading subscriptions from router")
        try:
            dump = await self.client.fetch_subscription_dump()
        except LuCIAPIError as e:
            logger.error(f"Failed to load subscriptions: {e}")
            raise
        self.subscriptions = parse_subscription_dump(dump)
        self._prune_locks()
        logger.info(f"Loaded {len(self.subscriptions)} subscription(s)")
        return self.subscriptions

    def _prune_locks(self) -> None:
        known = {record.id for record in self.subscriptions}
        for record_id in list(self._edit_locks):
            if record_id not in known and not self._edit_locks[record_id].locked():
                del self._edit_locks[record_id]

    async def update_subscription(self, subscription: SubscriptionRecord) -> bool:
        """
        Pushes the differences between `subscription` and the stored record with the same id.

        Returns:
            True when commands were sent and committed, False when nothing changed.

        Raises:
            KeyError: If no subscription with that id has been loaded.
            LuCIAPIError: If login, the mutation or the commit fails. The local
                list is left as it was.
        """
        async with self._lock_for(subscription.id):
            old = self._require(subscription.id)

            logger.info(f"Updating subscription {subscription.id} ({subscription.name})")
            for line in describe_subscription(old):
                logger.debug(f"old {line}")
            for line in describe_subscription(subscription):
                logger.debug(f"new {line}")

            commands = diff_subscriptions(old, subscription)
            if not has_changes(commands):
                logger.info(f"No fields changed for subscription {subscription.id}, skipping update")
                return False

            batch = build_batch_command(commands, subscription.id, self.client.package)
            await self._submit(batch)
            logger.info(f"Subscription {subscription.id} updated with {len(commands)} command(s)")
            return True

    async def toggle_subscription(self, subscription: SubscriptionRecord, enabled: bool) -> bool:
        """
        Switches a subscription on or off without diffing the rest of the record.

        Raises:
            KeyError: If no subscription with that id has been loaded.
        """
        async with self._lock_for(subscription.id):
            self._require(subscription.id)
            logger.info(f"Toggling subscription {subscription.id} ({subscription.name}) -> {enabled}")
            command = render_command(
                Command.set(SubscriptionField.ENABLED, encode_flag(enabled)),
                subscription.id,
                self.client.package,
            )
            await self._submit(f"{command} && {build_commit_command(self.client.package)}")
            return True

    async def _submit(self, command_line: str) -> None:
        try:
            token = await self.client.login()
            await self.client.exec(command_line, token)
            logger.debug(f"Executed: {command_line}")
            await self.client.commit(token)
        except LuCIAPIError as e:
            logger.error(f"Failed to apply subscription change: {e}")
            raise
        await self.load_subscriptions()

    async def load_template_options(self) -> List[str]:
        """
        Fetches the conversion template names.

        Failures are logged and leave the previous options in place.
        """
        try:
            listing = await self.client.fetch_template_listing()
        except LuCIAPIError as e:
            logger.warning(f"Failed to load template options: {e}")
            return self.template_options
        self.template_options = parse_template_listing(listing)
        return self.template_options

#
# End of subscription_manager.py
#######################################################################################################################
