from __future__ import annotations

"""Era-aware display names for rival contracts.

Names are a pure function of (type, era, category, category tags, seed): the
same seed always yields the same name, independent of the engine's RandomSource.
When the market tags a category (e.g. "ai"), descriptors come only from the
matching tech tags.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .rng import SeededRandom
from .types import ContractType


@dataclass(frozen=True, slots=True)
class EraVocabulary:
    era_id: str
    terms: Dict[ContractType, Tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class TechTag:
    tag_name: str
    descriptors: Tuple[str, ...] = ()


FALLBACK_NAMES: Dict[ContractType, str] = {
    ContractType.MODULE_DEVELOPMENT: "Module Development",
    ContractType.COMPLIANCE_STANDARDS: "Compliance Work",
    ContractType.ECOSYSTEM_INTEGRATION: "Integration Project",
    ContractType.MARKETING_CAMPAIGN: "Marketing Campaign",
    ContractType.OPTIMIZATION_COST: "Optimization Project",
}


def fallback_name(contract_type: Optional[ContractType], category_name: str) -> str:
    base = FALLBACK_NAMES.get(contract_type, "Contract") if contract_type is not None else "Contract"
    return f"{base} - {category_name}"


class ContractNamingSystem:
    def __init__(self, eras: Sequence[EraVocabulary] = (), tech_tags: Sequence[TechTag] = ()) -> None:
        self._eras = list(eras)
        self._tech_tags = list(tech_tags)

    def vocabulary_for_era(self, era_id: str) -> Optional[EraVocabulary]:
        """Exact match, else the latest configured era."""
        for vocab in self._eras:
            if vocab.era_id == era_id:
                return vocab
        return self._eras[-1] if self._eras else None

    def tags_for_category(self, category_tags: Sequence[str] = ()) -> List[TechTag]:
        wanted = set(category_tags)
        matching = [t for t in self._tech_tags if t.tag_name in wanted]
        return matching or list(self._tech_tags)

    def generate_name(
        self,
        contract_type: ContractType,
        era_id: str,
        category_name: str,
        seed: int,
        category_tags: Sequence[str] = (),
    ) -> str:
        vocab = self.vocabulary_for_era(era_id)
        if vocab is None:
            return fallback_name(contract_type, category_name)
        terms = vocab.terms.get(contract_type) or ()
        if not terms:
            return fallback_name(contract_type, category_name)

        rng = SeededRandom(seed)
        base_term = terms[rng.range_int(0, len(terms))]

        descriptor = ""
        tags = self.tags_for_category(category_tags)
        if tags:
            tag = tags[rng.range_int(0, len(tags))]
            if tag.descriptors:
                descriptor = tag.descriptors[rng.range_int(0, len(tag.descriptors))] + " "

        return f"{descriptor}{base_term} - {category_name}"
