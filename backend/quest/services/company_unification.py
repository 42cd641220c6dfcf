"""Company unification: find and merge near-duplicate company records.

Pipeline:
    1. Load all companies ordered by name (the order picks the canonical row)
    2. Normalize each name (lowercase, drop legal suffixes and punctuation)
    3. Score pairs by normalized Levenshtein similarity
    4. Group every later record scoring > 0.8 against a seed record
    5. Merge (apply mode only): repoint person profiles to the canonical
       company, then delete the duplicates

The grouping is O(n²) in the number of companies. This runs as a rare,
manually triggered administrator job, not on a request hot path.

Transactions: nothing here commits. Callers (get_db, the CLI script) wrap the
whole run in one transaction so a failure in any group rolls back every
group, and an apply run holds a transaction-scoped advisory lock.
"""

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession

from quest.models.company import CompanyProfile
from quest.repositories.company_repository import CompanyRepository

logger = logging.getLogger(__name__)

# =============================================================================
# Constants
# =============================================================================

# Strict lower bound: a score of exactly 0.8 is NOT a duplicate.
SIMILARITY_THRESHOLD = 0.8

LEGAL_SUFFIXES: tuple[str, ...] = (
    "inc",
    "incorporated",
    "ltd",
    "llc",
    "corp",
    "corporation",
    "company",
    "co",
    "limited",
)

_SUFFIX_PATTERN = re.compile(r"\b(?:" + "|".join(LEGAL_SUFFIXES) + r")\b\.?")
_NON_WORD_PATTERN = re.compile(r"[^\w\s]")


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class CompanyRecord:
    """A company row as seen by the unification routine.

    Attributes:
        id: String form of the company's primary key.
        name: Display name.
        metadata: Enrichment payload (opaque here).
    """

    id: str
    name: str
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_model(cls, company: CompanyProfile) -> "CompanyRecord":
        return cls(id=str(company.id), name=company.name, metadata=company.metadata_)


@dataclass(frozen=True)
class GroupMember:
    """A record inside a duplicate group with its score against the canonical name."""

    record: CompanyRecord
    similarity: float


@dataclass
class DuplicateGroup:
    """Ordered group of near-duplicate companies. members[0] is canonical."""

    members: list[GroupMember]

    @property
    def canonical(self) -> CompanyRecord:
        return self.members[0].record

    @property
    def duplicates(self) -> list[CompanyRecord]:
        return [member.record for member in self.members[1:]]

    def __len__(self) -> int:
        return len(self.members)


@dataclass
class MergeResult:
    """Outcome of merging (or proposing to merge) one duplicate group.

    Attributes:
        canonical_id: Id of the surviving company.
        canonical_name: Name of the surviving company.
        members: Every member with its similarity score.
        recommended: "merge" for groups with duplicates, else "keep".
        applied: False for dry runs.
        profiles_repointed: Person profiles moved to the canonical company.
        companies_deleted: Duplicate company rows removed.
    """

    canonical_id: str
    canonical_name: str
    members: list[GroupMember]
    recommended: Literal["merge", "keep"]
    applied: bool = False
    profiles_repointed: int = 0
    companies_deleted: int = 0


@dataclass
class UnificationResult:
    """Result of a full unification pass."""

    dry_run: bool
    groups: list[DuplicateGroup] = field(default_factory=list)
    merges: list[MergeResult] = field(default_factory=list)
    groups_merged: int = 0

    @property
    def duplicates_found(self) -> int:
        return len(self.groups)

    @property
    def total_duplicates_resolved(self) -> int:
        return sum(len(group) - 1 for group in self.groups)


# =============================================================================
# Normalization and Scoring
# =============================================================================


def normalize_company_name(name: str) -> str:
    """Reduce a company name to a comparable key.

    Lowercases, removes legal-entity suffixes (whole words, optional trailing
    period, anywhere in the name), strips punctuation and trims. Repeats
    until stable, so stripping punctuation can never expose a new suffix
    (``"C.O"`` → ``"co"`` → ``""``).

    Args:
        name: Raw company display name.

    Returns:
        Normalized name; may be empty (e.g. for ``"Inc."``).
    """
    previous = None
    current = name
    while current != previous:
        previous = current
        current = _SUFFIX_PATTERN.sub("", current.lower())
        current = _NON_WORD_PATTERN.sub("", current).strip()
    return current


def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings.

    Args:
        s1: First string.
        s2: Second string.

    Returns:
        Minimum number of single-character insertions, deletions and
        substitutions to transform s1 into s2.
    """
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def name_similarity(name1: str, name2: str) -> float:
    """Similarity in [0, 1] derived from edit distance.

    ``(max_len - distance) / max_len``; two empty strings score 1.0.
    Symmetric. Expects already-normalized names.
    """
    max_len = max(len(name1), len(name2))
    if max_len == 0:
        return 1.0
    return (max_len - levenshtein_distance(name1, name2)) / max_len


# =============================================================================
# Grouping
# =============================================================================


def group_duplicates(records: Sequence[CompanyRecord]) -> list[DuplicateGroup]:
    """Cluster near-duplicate companies.

    Records must already be in canonical order (name ascending); each seed
    is the earliest unprocessed record and every later unprocessed record
    scoring above SIMILARITY_THRESHOLD against the seed's normalized name
    joins its group. A record belongs to at most one group.

    Args:
        records: Companies ordered by name.

    Returns:
        Groups with more than one member, in seed order.
    """
    groups: list[DuplicateGroup] = []
    processed: set[str] = set()

    for i, seed in enumerate(records):
        if seed.id in processed:
            continue

        members = [GroupMember(record=seed, similarity=1.0)]
        base_name = normalize_company_name(seed.name)

        for candidate in records[i + 1 :]:
            if candidate.id in processed:
                continue
            similarity = name_similarity(
                base_name, normalize_company_name(candidate.name)
            )
            if similarity > SIMILARITY_THRESHOLD:
                members.append(GroupMember(record=candidate, similarity=similarity))
                processed.add(candidate.id)

        processed.add(seed.id)
        if len(members) > 1:
            groups.append(DuplicateGroup(members=members))

    return groups


# =============================================================================
# Merging
# =============================================================================


async def merge_group(
    db: AsyncSession,
    group: DuplicateGroup,
    *,
    dry_run: bool,
) -> MergeResult:
    """Merge one duplicate group into its canonical (first) member.

    Dry run touches nothing. Otherwise person profiles pointing at any
    duplicate are repointed to the canonical company in one UPDATE, then the
    duplicates are deleted in one DELETE.

    Args:
        db: Active async session. Caller owns the transaction.
        group: Group to merge.
        dry_run: Report the proposal without writing.

    Returns:
        MergeResult describing the proposal or the applied merge.
    """
    canonical = group.canonical
    result = MergeResult(
        canonical_id=canonical.id,
        canonical_name=canonical.name,
        members=list(group.members),
        recommended="merge" if len(group) > 1 else "keep",
    )
    if dry_run:
        return result

    duplicate_ids = [record.id for record in group.duplicates]
    if not duplicate_ids:
        return result

    result.profiles_repointed = await CompanyRepository.repoint_person_profiles(
        db, canonical.id, duplicate_ids
    )
    result.companies_deleted = await CompanyRepository.delete_by_ids(
        db, duplicate_ids
    )
    result.applied = True

    logger.info(
        "Merged %d companies into %s (%d person profiles repointed)",
        len(duplicate_ids),
        canonical.name,
        result.profiles_repointed,
    )
    return result


async def find_duplicate_companies(db: AsyncSession) -> list[DuplicateGroup]:
    """Load every company in name order and group the near-duplicates."""
    companies = await CompanyRepository.list_ordered_by_name(db)
    records = [CompanyRecord.from_model(company) for company in companies]
    return group_duplicates(records)


async def run_unification(db: AsyncSession, *, dry_run: bool) -> UnificationResult:
    """Find duplicate company groups and, unless dry_run, merge them all.

    Args:
        db: Active async session. Caller is responsible for committing or
            rolling back; an exception mid-run must roll back every group.
        dry_run: Only report proposed merges.

    Returns:
        UnificationResult with the groups found and merge outcomes.
    """
    if not dry_run:
        await CompanyRepository.acquire_unification_lock(db)

    groups = await find_duplicate_companies(db)
    result = UnificationResult(dry_run=dry_run, groups=groups)

    for group in groups:
        merge = await merge_group(db, group, dry_run=dry_run)
        result.merges.append(merge)
        if merge.applied:
            result.groups_merged += 1

    logger.info(
        "Company unification %s: %d duplicate groups (%d duplicate records), "
        "%d merged",
        "dry run" if dry_run else "applied",
        result.duplicates_found,
        result.total_duplicates_resolved,
        result.groups_merged,
    )
    return result
