from __future__ import annotations

import logging
from functools import partial

from clients.governance import GovernanceRegistry, native_treasury_address
from domain.valuation import OrganizationId, Treasury

from .call_executor import CallExecutor

logger = logging.getLogger(__name__)


class TreasuryDiscovery:
    """Walks program → realms → governances → native treasuries."""

    def __init__(self, registry: GovernanceRegistry, executor: CallExecutor) -> None:
        self.registry = registry
        self.executor = executor

    def discover_treasuries(self, organization_id: OrganizationId) -> list[Treasury]:
        realms = self.executor.execute(partial(self.registry.get_realms, organization_id))
        logger.info("Organization %s: %d realms", organization_id, len(realms))

        treasuries: list[Treasury] = []
        for realm in realms:
            governances = self.executor.execute(partial(self.registry.get_governances, realm))
            for governance in governances:
                treasuries.append(Treasury(address=native_treasury_address(governance), governance=governance))

        logger.info("Organization %s: %d treasuries", organization_id, len(treasuries))
        return treasuries


__all__ = ["TreasuryDiscovery"]
