from __future__ import annotations

"""Rival-issued contract offers.

A rival with enough cash and a foothold in a category can commission work from
the player. Temporary kinds (marketing, optimisation) carry a bounded world
effect that helps the issuer in that category for a few quarters once the
contract is delivered.

Eligibility
-----------
- Issuers: every company except the player with cash >= ``rival_issuer_min_cash``.
- Categories: the issuer's categories with share > ``rival_min_market_share``
  that are not on cooldown for that issuer.
- A dominant issuer (share >= ``dominance_share_threshold``) only commissions
  temporary work, pays less, and its effects are weaker and shorter.
"""

import logging
import uuid
from typing import Callable, Dict, List, Optional, Sequence

from . import config as c_cfg
from . import formulas as f
from .generator import ContractGenerator
from .naming import ContractNamingSystem, fallback_name
from .providers import MarketProvider, RivalCompanySnapshot, RivalProvider
from .rng import RandomSource, stable_seed
from .types import (
    Contract,
    ContractBalanceConfig,
    ContractTemplate,
    ContractType,
    ContractWorldEffect,
    MarketComponent,
    ReputationContext,
    TechAdoptionPhase,
)

logger = logging.getLogger(__name__)


def cooldown_key(issuer_id: str, category_id: str) -> str:
    return f"{issuer_id}_{category_id}"


class RivalOfferGenerator:
    def __init__(
        self,
        templates: Sequence[ContractTemplate],
        config: ContractBalanceConfig,
        generator: ContractGenerator,
        rng: RandomSource,
        naming: Optional[ContractNamingSystem] = None,
        *,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._templates = list(templates)
        self._config = config
        self._generator = generator
        self._rng = rng
        self._naming = naming
        self._id_factory = id_factory
        self._cooldowns: Dict[str, int] = {}

    # ------------------------------------------------------------------
    # Cooldowns
    # ------------------------------------------------------------------
    @property
    def cooldowns(self) -> Dict[str, int]:
        return dict(self._cooldowns)

    def is_on_cooldown(self, issuer_id: str, category_id: str) -> bool:
        return self._cooldowns.get(cooldown_key(issuer_id, category_id), 0) > 0

    def set_cooldown(self, issuer_id: str, category_id: str) -> None:
        quarters = int(self._config.per_issuer_per_category_offer_cooldown_quarters)
        if quarters <= 0:
            return
        self._cooldowns[cooldown_key(issuer_id, category_id)] = quarters

    def process_quarter_tick_cooldowns(self) -> None:
        for key in list(self._cooldowns):
            self._cooldowns[key] -= 1
            if self._cooldowns[key] <= 0:
                del self._cooldowns[key]

    def reset(self) -> None:
        self._cooldowns.clear()

    # ------------------------------------------------------------------
    # Eligibility
    # ------------------------------------------------------------------
    def eligible_issuers(self, rivals: RivalProvider) -> List[RivalCompanySnapshot]:
        return [
            c
            for c in rivals.list_companies()
            if c.company_id != c_cfg.PLAYER_COMPANY_ID and c.cash >= self._config.rival_issuer_min_cash
        ]

    def eligible_categories(self, issuer: RivalCompanySnapshot) -> List[str]:
        return [
            cat
            for cat, share in issuer.category_shares.items()
            if share > self._config.rival_min_market_share and not self.is_on_cooldown(issuer.company_id, cat)
        ]

    # ------------------------------------------------------------------
    # Rolls
    # ------------------------------------------------------------------
    def select_contract_type(self, is_dominant: bool) -> ContractType:
        roll = self._rng.range_float(0.0, 1.0)
        if is_dominant:
            if roll < c_cfg.RIVAL_DOMINANT_MARKETING_CHANCE:
                return ContractType.MARKETING_CAMPAIGN
            return ContractType.OPTIMIZATION_COST
        if roll < 0.30:
            return ContractType.MODULE_DEVELOPMENT
        if roll < 0.50:
            return ContractType.COMPLIANCE_STANDARDS
        if roll < 0.65:
            return ContractType.ECOSYSTEM_INTEGRATION
        if roll < 0.85:
            return ContractType.MARKETING_CAMPAIGN
        return ContractType.OPTIMIZATION_COST

    def tech_weight(self, category_id: str, market: Optional[MarketProvider]) -> float:
        if market is None:
            return 1.0
        phase = market.get_adoption_phase(category_id) or TechAdoptionPhase.GROWTH
        lo, hi = self._config.tech_phase_weight_bands.get(phase, (1.0, 1.0))
        weight = f.lerp(lo, hi, self._rng.range_float(0.0, 1.0))
        return min(weight, self._config.max_tech_adoption_multiplier)

    def base_payout(self, tech_weight: float, era_weight: float, is_dominant: bool) -> float:
        payout = self._config.rival_base_payout * tech_weight * era_weight
        if is_dominant:
            payout *= self._config.dominance_magnitude_multiplier
        step = float(c_cfg.RIVAL_PAYOUT_ROUNDING)
        return round(payout / step) * step

    def effect_duration(self, contract_type: ContractType, is_dominant: bool) -> int:
        if is_dominant and self._config.force_dominance_duration_to_1q:
            return 1
        if not contract_type.is_temporary:
            return 0
        return self._rng.range_int(1, self._config.max_effect_duration_quarters + 1)

    def create_world_effect(self, contract: Contract, duration: int, is_dominant: bool) -> ContractWorldEffect:
        component = (
            MarketComponent.MARKETING
            if contract.contract_type == ContractType.MARKETING_CAMPAIGN
            else MarketComponent.PRICE
        )
        magnitude = self._rng.range_float(c_cfg.RIVAL_EFFECT_MAGNITUDE_MIN, c_cfg.RIVAL_EFFECT_MAGNITUDE_MAX)
        if is_dominant:
            magnitude *= self._config.dominance_magnitude_multiplier
        magnitude = min(magnitude, self._config.max_effect_per_component_per_company_category)
        return ContractWorldEffect(
            effect_id=self._id_factory(),
            issuing_rival_id=contract.issuing_rival_id or "",
            target_category_id=contract.target_category_id or "",
            component=component,
            magnitude=magnitude,
            duration_quarters=duration,
            quarters_remaining=duration,
        )

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate_rival_contracts(
        self,
        count: int,
        current_day: int,
        rivals: Optional[RivalProvider],
        market: Optional[MarketProvider] = None,
        ctx: Optional[ReputationContext] = None,
    ) -> List[Contract]:
        out: List[Contract] = []
        if rivals is None:
            return out
        for _ in range(max(int(count), 0)):
            contract = self.generate_single_rival_contract(current_day, rivals, market, ctx)
            if contract is not None:
                out.append(contract)
        return out

    def generate_single_rival_contract(
        self,
        current_day: int,
        rivals: RivalProvider,
        market: Optional[MarketProvider] = None,
        ctx: Optional[ReputationContext] = None,
    ) -> Optional[Contract]:
        issuers = self.eligible_issuers(rivals)
        if not issuers:
            logger.debug("no eligible rival issuers")
            return None
        issuer = issuers[self._rng.range_int(0, len(issuers))]

        categories = self.eligible_categories(issuer)
        if not categories:
            return None
        category_id = categories[self._rng.range_int(0, len(categories))]

        share = float(issuer.category_shares.get(category_id, 0.0))
        is_dominant = share >= self._config.dominance_share_threshold
        contract_type = self.select_contract_type(is_dominant)

        tech = self.tech_weight(category_id, market)
        era = market.get_era_market_multiplier() if market is not None else 1.0
        payout = self.base_payout(tech, era, is_dominant)
        duration = self.effect_duration(contract_type, is_dominant)

        if not self._templates:
            logger.error("no contract templates available for rival contracts")
            return None
        template = self._templates[self._rng.range_int(0, len(self._templates))]

        era_id = market.current_era_id if market is not None else c_cfg.DEFAULT_ERA_ID
        seed = stable_seed(current_day, issuer.company_id, category_id)
        if self._naming is not None:
            tags = market.get_category_tags(category_id) if market is not None else ()
            title = self._naming.generate_name(contract_type, era_id, category_id, seed, tags)
        else:
            title = fallback_name(contract_type, category_id)

        contract = self._generator.generate(
            template,
            ctx or ReputationContext(),
            contract_id=self._id_factory(),
            client_name=issuer.name,
            current_day=current_day,
        )
        contract.title = title
        contract.issuing_rival_id = issuer.company_id
        contract.target_category_id = category_id
        contract.contract_type = contract_type
        contract.base_payout = payout
        contract.total_days = int(template.base_deadline_days)
        contract.days_remaining = int(template.base_deadline_days)

        if contract_type.is_temporary:
            contract.world_effect = self.create_world_effect(contract, duration, is_dominant)

        self.set_cooldown(issuer.company_id, category_id)
        logger.info(
            "rival offer %s from %s in %s type=%s payout=%.0f dominant=%s",
            contract.contract_id,
            issuer.company_id,
            category_id,
            contract_type.value,
            payout,
            is_dominant,
        )
        return contract
