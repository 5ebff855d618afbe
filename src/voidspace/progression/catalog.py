"""Achievement catalog: the single source of truth for ids, rewards and unlock rules.

Adding an achievement is a data change: append an entry to ACHIEVEMENTS.
Entries with a predicate are granted automatically by the trigger engine;
entries with a custom trigger are granted only when a collaborator fires
that trigger id.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from voidspace.progression.counters import ActivityCounters

RARITIES: tuple[str, ...] = ("common", "uncommon", "rare", "epic", "legendary")
CATEGORIES: tuple[str, ...] = ("sanctum", "learning", "streaks", "secret")

Predicate = Callable[[ActivityCounters, frozenset[str]], bool]


@dataclass(frozen=True)
class StatThreshold:
    """Satisfied once a counter reaches ``threshold``."""

    stat: str
    threshold: int

    def __call__(self, counters: ActivityCounters, unlocked: frozenset[str]) -> bool:
        return getattr(counters, self.stat) >= self.threshold


@dataclass(frozen=True)
class UnlockedAll:
    """Satisfied once every id in ``ids`` is unlocked."""

    ids: frozenset[str]

    def __call__(self, counters: ActivityCounters, unlocked: frozenset[str]) -> bool:
        return self.ids <= unlocked


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    category: str
    rarity: str
    xp: int
    predicate: Predicate | None = None
    custom_trigger: str | None = None
    secret: bool = False
    hint: str | None = None

    def is_satisfied(self, counters: ActivityCounters, unlocked: frozenset[str]) -> bool:
        """Evaluate the unlock rule. Custom-trigger entries are never satisfied here."""
        if self.predicate is None:
            return False
        return bool(self.predicate(counters, unlocked))


_SANCTUM_MILESTONES = frozenset({
    "hello_sanctum",
    "conversationalist",
    "code_conjurer",
    "genesis_deploy",
    "concept_collector",
    "knowledge_hoarder",
    "quiz_ace",
    "perfect_score",
})

ACHIEVEMENTS: tuple[Achievement, ...] = (
    # Sanctum: chat and code generation
    Achievement(
        "hello_sanctum", "Hello, Sanctum!", "Sent your first message to Sanctum",
        "sanctum", "common", 10, predicate=StatThreshold("sanctum_messages", 1),
    ),
    Achievement(
        "conversationalist", "Conversationalist", "Sent 100 messages to Sanctum",
        "sanctum", "uncommon", 75, predicate=StatThreshold("sanctum_messages", 100),
    ),
    Achievement(
        "code_conjurer", "Code Conjurer", "Generated your first smart contract code",
        "sanctum", "common", 25, predicate=StatThreshold("code_generations", 1),
    ),
    Achievement(
        "genesis_deploy", "Genesis Deploy", "Deployed your first contract to testnet",
        "sanctum", "rare", 100, predicate=StatThreshold("contracts_deployed", 1),
    ),
    Achievement(
        "concept_collector", "Concept Collector", "Learned 5 concepts in Learn mode",
        "sanctum", "common", 50, predicate=StatThreshold("concepts_learned", 5),
    ),
    Achievement(
        "knowledge_hoarder", "Knowledge Hoarder", "Learned 20 concepts",
        "sanctum", "epic", 200, predicate=StatThreshold("concepts_learned", 20),
    ),
    Achievement(
        "quiz_ace", "Quiz Ace", "Got 5 quizzes right in a row",
        "sanctum", "rare", 100, predicate=StatThreshold("max_quiz_streak", 5),
    ),
    Achievement(
        "perfect_score", "Perfect Score", "Got 10 quizzes right in a row",
        "sanctum", "epic", 250, predicate=StatThreshold("max_quiz_streak", 10),
    ),
    Achievement(
        "token_burner", "Token Burner", "Used 100,000+ tokens in Sanctum",
        "sanctum", "rare", 75, predicate=StatThreshold("tokens_used", 100_000),
    ),
    Achievement(
        "million_token_club", "Million Token Club", "Used 1,000,000+ tokens",
        "sanctum", "epic", 200, predicate=StatThreshold("tokens_used", 1_000_000),
    ),
    Achievement(
        "speed_demon", "Speed Demon", "Built and deployed a contract in under 3 minutes",
        "sanctum", "legendary", 500, custom_trigger="speed_deploy",
    ),
    Achievement(
        "curious_mind", "Curious Mind", 'Asked "why" or "how does this work" in Sanctum',
        "sanctum", "common", 25, custom_trigger="asked_why",
    ),
    Achievement(
        "security_minded", "Security Minded", "Asked for an audit of your code",
        "sanctum", "rare", 75, custom_trigger="warden_audit",
    ),
    Achievement(
        "defi_architect", "DeFi Architect", "Built a DeFi smart contract",
        "sanctum", "rare", 100, custom_trigger="built_defi",
    ),
    Achievement(
        "nft_creator", "NFT Creator", "Built an NFT contract",
        "sanctum", "rare", 100, custom_trigger="built_nft",
    ),
    Achievement(
        "test_runner", "Test Runner", "Generated tests for a smart contract",
        "sanctum", "uncommon", 50, custom_trigger="tests_generated",
    ),
    Achievement(
        "optimizer", "Optimizer", "Optimized a contract for gas efficiency",
        "sanctum", "uncommon", 50, custom_trigger="contract_optimized",
    ),
    Achievement(
        "mainnet_pioneer", "Mainnet Pioneer", "Deployed a contract to mainnet",
        "sanctum", "epic", 400, custom_trigger="mainnet_deployed",
    ),
    # Learning: curriculum tracks
    Achievement(
        "first_lesson", "First Lesson", "Completed your first learning module",
        "learning", "common", 15, predicate=StatThreshold("modules_completed", 1),
    ),
    Achievement(
        "explorer_initiate", "Explorer Initiate", "Completed 5 Explorer modules",
        "learning", "common", 50, predicate=StatThreshold("explorer_modules", 5),
    ),
    Achievement(
        "explorer_graduate", "Explorer Graduate", "Completed all 16 Explorer modules",
        "learning", "rare", 250, predicate=StatThreshold("explorer_modules", 16),
    ),
    Achievement(
        "builder_initiate", "Builder Initiate", "Completed 5 Builder modules",
        "learning", "common", 50, predicate=StatThreshold("builder_modules", 5),
    ),
    Achievement(
        "builder_graduate", "Builder Graduate", "Completed all 22 Builder modules",
        "learning", "rare", 350, predicate=StatThreshold("builder_modules", 22),
    ),
    Achievement(
        "hacker_initiate", "Hacker Initiate", "Completed 5 Hacker modules",
        "learning", "common", 50, predicate=StatThreshold("hacker_modules", 5),
    ),
    Achievement(
        "hacker_graduate", "Hacker Graduate", "Completed all 16 Hacker modules",
        "learning", "rare", 250, predicate=StatThreshold("hacker_modules", 16),
    ),
    Achievement(
        "founder_initiate", "Founder Initiate", "Completed 5 Founder modules",
        "learning", "common", 50, predicate=StatThreshold("founder_modules", 5),
    ),
    Achievement(
        "founder_graduate", "Founder Graduate", "Completed all 12 Founder modules",
        "learning", "rare", 200, predicate=StatThreshold("founder_modules", 12),
    ),
    # Learning: guided paths reported by content modules
    Achievement(
        "quick_starter", "Quick Starter", "Completed the Quick Start guide",
        "learning", "common", 25, custom_trigger="quick_start_done",
    ),
    Achievement(
        "cross_chain_scholar", "Cross-Chain Scholar", "Completed the cross-chain deep dive",
        "learning", "rare", 75, custom_trigger="cross_chain_done",
    ),
    Achievement(
        "rustacean_rising", "Rustacean Rising", "Completed the Why Rust and Rust Curriculum paths",
        "learning", "rare", 100, custom_trigger="rust_path_done",
    ),
    # Streaks
    Achievement(
        "weekend_warrior", "Weekend Warrior", "Completed a task on both Saturday and Sunday",
        "streaks", "common", 30, custom_trigger="weekend_active",
    ),
    # Secrets
    Achievement(
        "the_plan", "The Plan", "Asked Sanctum about the plan",
        "secret", "rare", 100, custom_trigger="asked_about_the_plan", secret=True,
        hint="Some questions are best asked directly.",
    ),
    Achievement(
        "void_ascendant", "Void Ascendant", "Earned every Sanctum milestone",
        "secret", "legendary", 1000, predicate=UnlockedAll(_SANCTUM_MILESTONES), secret=True,
        hint="Master every corner of the Sanctum.",
    ),
)

ACHIEVEMENT_MAP: dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}

_RARITY_PRIORITY = {rarity: i for i, rarity in enumerate(RARITIES)}


def by_category(category: str, catalog: Iterable[Achievement] = ACHIEVEMENTS) -> list[Achievement]:
    return [a for a in catalog if a.category == category]


def visible(catalog: Iterable[Achievement] = ACHIEVEMENTS) -> list[Achievement]:
    """Non-secret achievements."""
    return [a for a in catalog if not a.secret]


def sort_by_rarity(achievements: Iterable[Achievement]) -> list[Achievement]:
    """Legendary first; catalog order is kept within a rarity."""
    return sorted(achievements, key=lambda a: -_RARITY_PRIORITY.get(a.rarity, 0))
