from __future__ import annotations

"""Player-facing offer generation.

Templates are weighted by how close their skill band sits to the skill level
the player's reputation implies, so a young company mostly sees entry-level
work while an established one sees harder contracts.
"""

import logging
import uuid
from typing import Callable, List, Optional, Sequence

from . import formulas as f
from .generator import ContractGenerator
from .providers import ReputationProvider, reputation_context
from .rng import RandomSource
from .types import Contract, ContractState, ContractTemplate, ReputationContext

logger = logging.getLogger(__name__)


CLIENT_PREFIXES = ("Tech", "Cyber", "Digital", "Cloud", "Smart", "Net", "Data", "Web", "Info", "Soft")
CLIENT_SUFFIXES = (
    "Corp",
    "Systems",
    "Solutions",
    "Industries",
    "Group",
    "Dynamics",
    "Innovations",
    "Partners",
    "Labs",
    "Tech",
)


def new_contract_id() -> str:
    return uuid.uuid4().hex


class OfferGenerator:
    def __init__(
        self,
        templates: Sequence[ContractTemplate],
        generator: ContractGenerator,
        rng: RandomSource,
        reputation: Optional[ReputationProvider] = None,
        *,
        id_factory: Callable[[], str] = new_contract_id,
    ) -> None:
        self._templates = list(templates)
        self._generator = generator
        self._rng = rng
        self._reputation = reputation
        self._id_factory = id_factory

    @property
    def templates(self) -> List[ContractTemplate]:
        return list(self._templates)

    def generate_initial_contracts(
        self, contracts: List[Contract], max_available: int, current_day: int
    ) -> List[Contract]:
        return self.generate_new_contracts(contracts, max_available, max_available, current_day)

    def generate_new_contracts(
        self, contracts: List[Contract], count: int, max_available: int, current_day: int
    ) -> List[Contract]:
        """Append up to ``count`` offers without exceeding ``max_available`` open offers."""
        available = sum(1 for c in contracts if c.state == ContractState.AVAILABLE)
        to_generate = max(0, min(int(count), int(max_available) - available))

        created: List[Contract] = []
        for _ in range(to_generate):
            contract = self.generate_single_contract(current_day)
            if contract is None:
                break
            contracts.append(contract)
            created.append(contract)

        if created:
            logger.info("generated %d new contract offer(s) on day %d", len(created), current_day)
        return created

    def generate_single_contract(self, current_day: int) -> Optional[Contract]:
        if not self._templates:
            logger.warning("no contract templates available")
            return None

        ctx = reputation_context(self._reputation)
        template = self.select_template(ctx)
        if template is None:
            logger.warning("no suitable contract template found")
            return None

        contract_id = self._id_factory()
        client_name = self.generate_client_name()
        return self._generator.generate(
            template,
            ctx,
            contract_id=contract_id,
            client_name=client_name,
            current_day=current_day,
        )

    # ------------------------------------------------------------------
    # Template choice
    # ------------------------------------------------------------------
    def template_weight(self, template: ContractTemplate, ctx: ReputationContext) -> float:
        rep01 = ctx.reputation / ctx.max_reputation if ctx.max_reputation > 0 else 0.0
        return f.template_offer_weight(template.average_skill_requirement(), rep01, ctx.employee_max_skill)

    def select_template(self, ctx: ReputationContext) -> Optional[ContractTemplate]:
        candidates: List[ContractTemplate] = []
        weights: List[float] = []
        for t in self._templates:
            w = self.template_weight(t, ctx)
            if w > 0.0:
                candidates.append(t)
                weights.append(w)

        if not candidates:
            return self.select_closest_template(ctx)

        r = self._rng.range_float(0.0, sum(weights))
        cumulative = 0.0
        for t, w in zip(candidates, weights):
            cumulative += w
            if r <= cumulative:
                return t
        return candidates[-1]

    def select_closest_template(self, ctx: ReputationContext) -> Optional[ContractTemplate]:
        if not self._templates:
            return None
        rep01 = ctx.reputation / ctx.max_reputation if ctx.max_reputation > 0 else 0.0
        target = rep01 * ctx.employee_max_skill
        return min(self._templates, key=lambda t: abs(t.average_skill_requirement() - target))

    def generate_client_name(self) -> str:
        prefix = CLIENT_PREFIXES[self._rng.range_int(0, len(CLIENT_PREFIXES))]
        suffix = CLIENT_SUFFIXES[self._rng.range_int(0, len(CLIENT_SUFFIXES))]
        return f"{prefix}{suffix}"
